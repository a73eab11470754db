# src/municipios_dataflow/__init__.py
"""
Municípios DataFlow — pipeline determinístico do cadastro de municípios.

Este pacote raiz define o namespace público do Municípios DataFlow, um
pipeline que consome o cadastro de municípios (códigos TOM e IBGE),
detecta mudanças entre snapshots, calcula um fingerprint criptográfico
determinístico por município e exporta o resultado particionado por UF
em três formatos sincronizados (CSV, JSON e binário).

Princípios centrais:
    - O pipeline é um DAG explícito de Steps canônicos
    - A execução é síncrona, determinística e reprodutível
    - O mesmo registro sempre produz o mesmo hash
    - Rastreabilidade (event log + manifest) é um requisito de primeira classe

Arquitetura em alto nível:
    - core.config       → carregamento, merge e hashing de configuração
    - core.pipeline     → protocolos, contexto de execução e registro de Steps
    - core.engine       → planejamento (DAG) e execução do pipeline
    - core.traceability → Manifest da run
    - domain            → modelo de município, diff de snapshots, derivação de hash, exportação, consulta
    - steps             → Steps concretos (snapshot, ingest, export)
    - runner / cli      → orquestração e interface de linha de comando
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
