# src/municipios_dataflow/core/engine/__init__.py
"""
Engine do Municípios DataFlow.

Componentes principais:
    - planner → ordenação topológica determinística e validações estruturais
    - engine  → execução coordenada de Steps com política fail-fast

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por run
    - A execução é síncrona e sequencial (sem paralelismo entre Steps)
"""
