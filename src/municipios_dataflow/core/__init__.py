# src/municipios_dataflow/core/__init__.py
"""
Core do Municípios DataFlow.

Este pacote reúne as responsabilidades independentes de domínio:
planejamento, execução e rastreabilidade do pipeline.

Componentes principais:
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - pipeline     → protocolo de Step, contexto de execução e registry
    - engine       → planejamento (DAG) e execução controlada do pipeline
    - traceability → Manifest da run
    - errors / exceptions → catálogo canônico de erros e exceções tipadas

Limites explícitos:
    - Não contém lógica específica do cadastro de municípios
    - Não depende de CLI ou serviços externos
"""
