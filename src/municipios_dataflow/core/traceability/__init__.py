# src/municipios_dataflow/core/traceability/__init__.py
"""
Rastreabilidade do Municípios DataFlow.

- manifest → registro persistente (JSON) de cada run: config hash, estado dos Steps e Event Log
"""
