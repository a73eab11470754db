"""
Municípios DataFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do pipeline.
Erros são artefatos da run e fazem parte do contrato operacional,
devendo ser:

- explícitos
- serializáveis
- rastreáveis (persistidos no Manifest via StepResult.payload["error"])

Taxonomia:
- Erro de decodificação recuperável: tratado localmente pelo fallback de encoding
  (não gera payload).
- Linha malformada: descartada silenciosamente (apenas contabilizada em métricas).
- Erro fatal de I/O, download ou derivação: gera payload e aborta a run.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Snapshots
SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"
SNAPSHOT_DECODE_ERROR = "SNAPSHOT_DECODE_ERROR"
SNAPSHOT_FETCH_ERROR = "SNAPSHOT_FETCH_ERROR"

# Derivação / Exportação
HASH_DERIVATION_ERROR = "HASH_DERIVATION_ERROR"
OUTPUT_WRITE_ERROR = "OUTPUT_WRITE_ERROR"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


_TYPE_BY_EXCEPTION = {
    "SnapshotNotFound": SNAPSHOT_NOT_FOUND,
    "SnapshotDecodeError": SNAPSHOT_DECODE_ERROR,
    "SnapshotFetchError": SNAPSHOT_FETCH_ERROR,
    "HashDerivationError": HASH_DERIVATION_ERROR,
    "OutputWriteError": OUTPUT_WRITE_ERROR,
    "EngineConfigurationError": ENGINE_CONFIGURATION_ERROR,
    "EngineExecutionError": ENGINE_EXECUTION_ERROR,
}


def error_type_for(exc: BaseException) -> str:
    """Código estável do catálogo para uma exceção (fallback: ENGINE_EXECUTION_ERROR)."""
    for cls in type(exc).__mro__:
        code = _TYPE_BY_EXCEPTION.get(cls.__name__)
        if code is not None:
            return code
    return ENGINE_EXECUTION_ERROR


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def snapshot_not_found(
    *,
    path: str,
    step: Optional[str] = None,
    hint: str = "Habilite o download (steps.snapshot.acquire.fetch) ou coloque o snapshot no diretório de trabalho.",
) -> ErrorPayload:
    return ErrorPayload(
        type=SNAPSHOT_NOT_FOUND,
        message=f"Snapshot não encontrado: {path}" if path else "Snapshot não encontrado",
        details={"path": path, "step": step},
        hint=hint,
    )


def output_write_error(
    *,
    path: str,
    reason: str,
    step: Optional[str] = None,
    hint: str = "Verifique permissões e espaço em disco do diretório de saída. Arquivos parciais não são removidos.",
) -> ErrorPayload:
    return ErrorPayload(
        type=OUTPUT_WRITE_ERROR,
        message="Falha ao gravar arquivo de saída",
        details={"path": path, "reason": reason, "step": step},
        hint=hint,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o event log da run para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração do run/steps antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )


def from_exception(exc: BaseException, *, step: Optional[str] = None) -> ErrorPayload:
    """Converte qualquer exceção em ErrorPayload (sem stack trace).

    - MunicipiosException: preserva message/details/hint.
    - OSError: mapeado para OUTPUT_WRITE_ERROR quando não tipado antes.
    - Demais: ENGINE_EXECUTION_ERROR com classe e mensagem.
    """
    details = getattr(exc, "details", None)
    if isinstance(details, dict) and hasattr(exc, "message"):
        payload_details = dict(details)
        payload_details.setdefault("step", step)
        return ErrorPayload(
            type=error_type_for(exc),
            message=str(exc) or "Erro de execução",
            details=payload_details,
            hint=getattr(exc, "hint", None),
        )

    if isinstance(exc, FileNotFoundError):
        return snapshot_not_found(path=str(exc.filename or ""), step=step)

    if isinstance(exc, OSError):
        return output_write_error(
            path=str(getattr(exc, "filename", "") or ""),
            reason=str(exc) or exc.__class__.__name__,
            step=step,
        )

    return engine_execution_error(
        step=step,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )
