# src/municipios_dataflow/domain/derivation.py
"""
Derivação determinística do hash por município (PBKDF2-HMAC-SHA256).

Política de derivação (v1):
    - Senha: os cinco campos do registro unidos por ";" na ordem
      TOM, IBGE, NomeTOM, NomeIBGE, UF
    - Salt: UTF-8 de (IBGE + pepper), sem componente aleatório
    - Iterações: 50.000 (default)
    - Tamanho: 32 bytes (default), saída hexadecimal minúscula

O salt é intencionalmente reprodutível: o mesmo registro produz sempre o
mesmo hash, o que permite regerar e comparar saídas entre runs. Isto não
é um esquema de armazenamento de senhas.
"""

from __future__ import annotations

import hashlib

from municipios_dataflow.core.exceptions import HashDerivationError
from municipios_dataflow.domain.record import Municipio

DEFAULT_ITERATIONS = 50_000
DEFAULT_HASH_BYTES = 32
DEFAULT_PEPPER = "municipios-dataflow:pepper:v1"
HASH_NAME = "sha256"


def build_salt(ibge: str, pepper: str = DEFAULT_PEPPER) -> bytes:
    try:
        return (ibge + pepper).encode("utf-8")
    except UnicodeEncodeError as e:
        raise HashDerivationError(
            "Falha ao codificar o salt em UTF-8",
            details={"ibge": repr(ibge), "reason": str(e)},
        ) from e


def derive_hash_hex(
    password: str,
    salt: bytes,
    iterations: int = DEFAULT_ITERATIONS,
    hash_bytes: int = DEFAULT_HASH_BYTES,
) -> str:
    if not isinstance(iterations, int) or iterations <= 0:
        raise ValueError(f"iterations must be a positive int, got {iterations!r}")
    if not isinstance(hash_bytes, int) or hash_bytes <= 0:
        raise ValueError(f"hash_bytes must be a positive int, got {hash_bytes!r}")

    try:
        secret = password.encode("utf-8")
    except UnicodeEncodeError as e:
        raise HashDerivationError(
            "Falha ao codificar o material de senha em UTF-8",
            details={"reason": str(e)},
        ) from e

    derived = hashlib.pbkdf2_hmac(HASH_NAME, secret, salt, iterations, dklen=hash_bytes)
    return derived.hex()


def derive_record_hash(
    municipio: Municipio,
    iterations: int = DEFAULT_ITERATIONS,
    hash_bytes: int = DEFAULT_HASH_BYTES,
    pepper: str = DEFAULT_PEPPER,
) -> str:
    """Hash PBKDF2 de um município; idêntico para registros idênticos."""
    return derive_hash_hex(
        municipio.concatenated(),
        build_salt(municipio.ibge, pepper),
        iterations,
        hash_bytes,
    )
