# src/municipios_dataflow/core/engine/engine.py
"""
Engine de execução do pipeline do Municípios DataFlow.

- O Engine **não** muta instâncias de StepResult in-place; enriquecimentos
  (warnings do RunContext) geram uma nova instância (dataclasses.replace).
- Exceções levantadas por Steps são convertidas em ErrorPayload e
  persistidas em StepResult.payload["error"] (sem stack trace cru).
- Política fail-fast (`engine.fail_fast`, default True): a primeira falha
  encerra a run; falhas de I/O, download ou derivação são fatais.
- Quando um Manifest é fornecido, o Engine registra início e fim de cada Step.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from municipios_dataflow.core.errors import ErrorPayload, engine_configuration_error, from_exception
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from municipios_dataflow.core.traceability.manifest import RunManifest, step_finished, step_started

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline (ordem de execução preservada)."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return any(r.status == StepStatus.FAILED for r in self.steps.values())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    """Engine canônico (planner + executor síncrono)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext, manifest: Optional[RunManifest] = None):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest = manifest

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    def _kind_of(self, step: Step) -> StepKind:
        return getattr(step, "kind", None) or StepKind.DIAGNOSTIC

    def _merge_ctx_warnings(self, step_id: str, result: StepResult) -> StepResult:
        existing = list(result.warnings or [])
        merged: List[str] = []
        for msg in existing + list(self.ctx.warnings.get(step_id, []) or []):
            if msg not in merged:
                merged.append(msg)
        return replace(result, step_id=step_id, warnings=merged)

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> StepResult:
        r = StepResult(
            step_id=step.id,
            kind=self._kind_of(step),
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._merge_ctx_warnings(step.id, r)

    def _record(self, result: StepResult) -> None:
        if self.manifest is not None:
            step_finished(self.manifest, result=result, ts=_now())

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                results[sid] = self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")
                self._record(results[sid])
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            if any(results.get(d) and results[d].status == StepStatus.FAILED for d in deps):
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed dependency",
                )
                self._record(results[sid])
                continue

            if self.manifest is not None:
                step_started(self.manifest, step_id=sid, kind=self._kind_of(step).value, ts=_now())

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")
                result = self._merge_ctx_warnings(sid, step_result)

            except Exception as e:
                error: ErrorPayload = from_exception(e, step=sid)
                if isinstance(e, TypeError) and "must return StepResult" in str(e):
                    error = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={"step_id": sid, "expected": "StepResult"},
                        hint="Ajuste o Step para retornar StepResult",
                    )
                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message=error.message,
                    error_type=error.type,
                )
                result = self._mk_result(
                    step=step,
                    status=StepStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )

            results[sid] = result
            self._record(result)

            if result.status == StepStatus.FAILED and self._fail_fast():
                break

        return RunResult(steps=results)
