# src/municipios_dataflow/io/__init__.py
"""Colaboradores de I/O externos ao domínio (download do CSV de origem)."""
