"""Step canônico: snapshot.diff (v1).

Compara o snapshot base com o novo (linha inteira, semântica de conjunto)
e grava o relatório de mudanças `municipios_diff_<YYYYMMDD_HHMMSS>.csv`
no diretório de trabalho.

- Só compara quando os dois snapshots existem; caso contrário conclui
  com sucesso sem comparar (`payload["compared"] = False`)
- Sem diferenças → nenhum relatório é gravado
- Falha de decodificação é fatal (SnapshotDecodeError)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

from municipios_dataflow.core.config import step_config
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from municipios_dataflow.domain.snapshot import (
    DEFAULT_FALLBACK_ENCODING,
    DEFAULT_REPORT_PREFIX,
    diff_lines,
    read_snapshot_lines,
    write_change_report,
)
from municipios_dataflow.steps._result import failed_result


@dataclass
class SnapshotDiffStep(Step):
    """Line-Set Differ sobre os snapshots publicados por snapshot.acquire."""

    id: str = "snapshot.diff"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]
    clock: Callable[[], datetime] = field(default=datetime.now, repr=False)

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["snapshot.acquire"]

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx.config, self.id)

        try:
            base_path = ctx.get_artifact("snapshot.base_path")
            new_path = ctx.get_artifact("snapshot.new_path")

            if not (base_path.exists() and new_path.exists()):
                ctx.set_artifact("snapshot.diff", None)
                ctx.log(step_id=self.id, level="info", message="single snapshot available; nothing to compare")
                return StepResult(
                    step_id=self.id,
                    kind=self.kind,
                    status=StepStatus.SUCCESS,
                    summary="single snapshot; diff not computed",
                    payload={"compared": False},
                )

            fallback = cfg.get("fallback_encoding") or DEFAULT_FALLBACK_ENCODING
            diff = diff_lines(
                read_snapshot_lines(base_path, fallback),
                read_snapshot_lines(new_path, fallback),
            )
            ctx.set_artifact("snapshot.diff", diff)

            report = write_change_report(
                diff,
                ctx.work_dir,
                self.clock(),
                cfg.get("report_prefix") or DEFAULT_REPORT_PREFIX,
            )

            if report is None:
                ctx.log(step_id=self.id, level="info", message="no changes detected")
            else:
                ctx.log(
                    step_id=self.id,
                    level="info",
                    message="changes detected",
                    added=len(diff.added),
                    removed=len(diff.removed),
                    report=str(report),
                )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="no changes" if report is None else "changes detected",
                metrics={"added": len(diff.added), "removed": len(diff.removed)},
                warnings=[],
                artifacts={"report_path": str(report)} if report else {},
                payload={"compared": True},
            )

        except Exception as e:
            return failed_result(self, ctx, e)
