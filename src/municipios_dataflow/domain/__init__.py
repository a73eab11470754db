# src/municipios_dataflow/domain/__init__.py
"""
Domínio do cadastro de municípios.

Funções puras, sem RunContext:
    - record     → modelo `Municipio`, sanitização e parsing de linhas
    - snapshot   → leitura de snapshots com fallback de encoding e diff por conjunto de linhas
    - derivation → hash PBKDF2-HMAC-SHA256 determinístico por município
    - export     → agrupamento por UF e writers CSV / JSON / BIN
    - query      → filtro da consulta interativa
"""
