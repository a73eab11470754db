"""Step canônico: ingest.parse (v1).

Responsabilidades:
- ler o snapshot ativo (UTF-8 com fallback de encoding)
- converter as linhas em `Municipio`, pulando o cabeçalho
- publicar a coleção imutável como artifact `data.municipios`

Linhas vazias ou com menos de cinco campos são descartadas sem erro e
apenas contabilizadas em `metrics["skipped"]`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from municipios_dataflow.core.config import step_config
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from municipios_dataflow.domain.record import (
    DEFAULT_DELIMITER,
    DEFAULT_HEADER_MARKERS,
    FIELD_COUNT,
    is_header,
    parse_lines,
)
from municipios_dataflow.domain.snapshot import DEFAULT_FALLBACK_ENCODING, read_snapshot_lines
from municipios_dataflow.steps._result import failed_result


@dataclass
class IngestParseStep(Step):
    """Parseia o snapshot ativo em registros de município."""

    id: str = "ingest.parse"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["snapshot.diff"]

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx.config, self.id)

        try:
            path = ctx.get_artifact("snapshot.active_path")
            markers = tuple(cfg.get("header_markers") or DEFAULT_HEADER_MARKERS)
            delimiter = cfg.get("delimiter") or DEFAULT_DELIMITER

            lines = read_snapshot_lines(path, cfg.get("fallback_encoding") or DEFAULT_FALLBACK_ENCODING)
            municipios = parse_lines(
                lines,
                delimiter=delimiter,
                min_fields=int(cfg.get("min_fields", FIELD_COUNT)),
                header_markers=markers,
            )
            ctx.set_artifact("data.municipios", tuple(municipios))

            header = 1 if lines and is_header(lines[0], markers, delimiter=delimiter) else 0
            skipped = len(lines) - header - len(municipios)
            by_region = Counter(m.uf for m in municipios)

            warnings: List[str] = []
            if not municipios:
                msg = f"no records parsed from {path}"
                warnings.append(msg)
                ctx.add_warning(step_id=self.id, message=msg)

            ctx.log(
                step_id=self.id,
                level="info",
                message="records parsed",
                path=str(path),
                records=len(municipios),
                skipped=skipped,
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(municipios)} records parsed",
                metrics={
                    "lines": len(lines),
                    "records": len(municipios),
                    "skipped": skipped,
                    "regions": len(by_region),
                },
                warnings=warnings,
                artifacts={"source_path": str(path)},
                payload={"records_by_region": dict(sorted(by_region.items()))},
            )

        except Exception as e:
            return failed_result(self, ctx, e)
