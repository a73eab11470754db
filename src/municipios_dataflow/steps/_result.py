# src/municipios_dataflow/steps/_result.py
"""Construção do StepResult de falha compartilhada pelos Steps concretos."""

from __future__ import annotations

from municipios_dataflow.core.errors import from_exception
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepResult, StepStatus


def failed_result(step: Step, ctx: RunContext, exc: Exception) -> StepResult:
    error = from_exception(exc, step=step.id)
    ctx.log(
        step_id=step.id,
        level="error",
        message=f"{step.id} failed",
        error_type=error.type,
        error_message=error.message,
    )
    return StepResult(
        step_id=step.id,
        kind=step.kind,
        status=StepStatus.FAILED,
        summary=error.message,
        metrics={},
        warnings=[],
        artifacts={},
        payload={"error": error.to_dict()},
    )
