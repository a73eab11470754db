"""
Municípios DataFlow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Municípios DataFlow.

Objetivo:
- Permitir que funções de domínio e Steps levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em falhas fatais do pipeline

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Falhas aqui definidas são fatais: abortam a run (não há retry nem skip por registro).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class MunicipiosException(Exception):
    """Base class para exceções internas do pipeline.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class SnapshotNotFound(MunicipiosException):
    """Snapshot obrigatório não existe no diretório de trabalho."""


@dataclass(eq=False)
class SnapshotDecodeError(MunicipiosException):
    """Snapshot não pôde ser decodificado nem em UTF-8 nem no encoding de fallback."""


@dataclass(eq=False)
class SnapshotFetchError(MunicipiosException):
    """Falha no download do CSV de origem (tentativa única, sem retry)."""


# ---------------------------------------------------------------------------
# Derivação / Exportação
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class HashDerivationError(MunicipiosException):
    """Falha ao derivar o hash PBKDF2 de um município."""


@dataclass(eq=False)
class OutputWriteError(MunicipiosException):
    """Falha ao criar diretório ou arquivo de saída."""


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EngineConfigurationError(MunicipiosException):
    """Configuração inválida ou inconsistente para execução."""


@dataclass(eq=False)
class EngineExecutionError(MunicipiosException):
    """Erro inesperado durante execução do Engine (encapsulado)."""
