# src/municipios_dataflow/core/pipeline/types.py
"""
Resultado de um Step, como aparece no resumo da CLI e no Manifest.

`StepResult` é imutável; os valores textuais de `StepStatus` e `StepKind`
("success", "export", ...) são exatamente os gravados em `run_manifest.json`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline.

    Tipos definidos:
        - DIAGNOSTIC: aquisição e comparação de snapshots
        - TRANSFORM: parsing e normalização de registros
        - EXPORT: materialização dos arquivos de saída

    O tipo é puramente informativo: o Engine não o utiliza para decidir execução.
    """
    DIAGNOSTIC = "diagnostic"
    TRANSFORM = "transform"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: execução pulada por decisão explícita (config ou dependência falha)
        - FAILED: execução interrompida por erro
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução do Step
        - summary: resumo textual da execução
        - metrics: métricas numéricas produzidas pelo Step
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: referências a arquivos produzidos (paths)
        - payload: dados adicionais livres (ex.: `error`, `impact`)
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
