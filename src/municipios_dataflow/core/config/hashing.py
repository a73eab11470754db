# src/municipios_dataflow/core/config/hashing.py
"""
Identidade da configuração efetiva de uma run (`inputs.config_hash` no Manifest).

Duas runs com o mesmo hash usaram o mesmo pepper, o mesmo número de
iterações e os mesmos diretórios, logo produzem os mesmos arquivos por UF
para o mesmo snapshot. SHA-256 sobre JSON com chaves ordenadas.

Não confundir com o hash PBKDF2 de cada município (`domain.derivation`).
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do pipeline.

    Configurações estruturalmente equivalentes produzem o mesmo hash,
    independentemente da ordem original das chaves.

    Args:
        config (Dict[str, Any]): Configuração efetiva do pipeline.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
