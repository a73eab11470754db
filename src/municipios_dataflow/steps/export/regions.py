"""Step canônico: export.regions (v1).

Materializa, para cada UF exportável, os três arquivos sincronizados
(CSV e JSON com hash, BIN sem hash) a partir de `data.municipios`.

Progresso:
- evento `info` a cada `progress_every` registros e ao fim de cada UF,
  com o tempo decorrido formatado ("{m}m {s}s {ms}ms")
- evento `info` por UF concluída

Falhas de escrita ou de derivação são fatais; arquivos parciais
permanecem no disco.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import List

from municipios_dataflow.core.config import step_config
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from municipios_dataflow.domain.derivation import (
    DEFAULT_HASH_BYTES,
    DEFAULT_ITERATIONS,
    DEFAULT_PEPPER,
    derive_record_hash,
)
from municipios_dataflow.domain.export import (
    DEFAULT_EXCLUDED_REGIONS,
    DEFAULT_PROGRESS_EVERY,
    RegionExport,
    export_regions,
    format_elapsed,
)
from municipios_dataflow.steps._result import failed_result

DEFAULT_OUT_DIR = "mun_hash_por_uf"
DEFAULT_BIN_DIR = "mun_bin_por_uf"


@dataclass
class ExportRegionsStep(Step):
    """Exportador particionado por UF (CSV / JSON / BIN)."""

    id: str = "export.regions"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.parse"]

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx.config, self.id)

        def on_progress(uf: str, done: int, total: int, elapsed_ms: int) -> None:
            ctx.log(
                step_id=self.id,
                level="info",
                message=f"[{uf}] {done}/{total} ({format_elapsed(elapsed_ms)})",
                region=uf,
                done=done,
                total=total,
                elapsed_ms=elapsed_ms,
            )

        def on_region_done(result: RegionExport) -> None:
            ctx.log(
                step_id=self.id,
                level="info",
                message=f"[{result.uf}] exported {result.count} records in {format_elapsed(result.elapsed_ms)}",
                region=result.uf,
                count=result.count,
                csv=str(result.csv_path),
                json=str(result.json_path),
                bin=str(result.bin_path),
            )

        try:
            municipios = ctx.get_artifact("data.municipios")
            out_dir = ctx.resolve_path(cfg.get("out_dir") or DEFAULT_OUT_DIR)
            bin_dir = ctx.resolve_path(cfg.get("bin_dir") or DEFAULT_BIN_DIR)

            derive = partial(
                derive_record_hash,
                iterations=int(cfg.get("iterations", DEFAULT_ITERATIONS)),
                hash_bytes=int(cfg.get("hash_bytes", DEFAULT_HASH_BYTES)),
                pepper=str(cfg.get("pepper", DEFAULT_PEPPER)),
            )

            exports = export_regions(
                municipios,
                out_dir=out_dir,
                bin_dir=bin_dir,
                derive=derive,
                excluded=cfg.get("excluded_regions", DEFAULT_EXCLUDED_REGIONS),
                progress_every=int(cfg.get("progress_every", DEFAULT_PROGRESS_EVERY)),
                on_progress=on_progress,
                on_region_done=on_region_done,
            )
            ctx.set_artifact("export.regions", exports)

            exported = sum(x.count for x in exports)
            elapsed_ms = sum(x.elapsed_ms for x in exports)
            ctx.log(
                step_id=self.id,
                level="info",
                message="export finished",
                regions=len(exports),
                records=exported,
                elapsed=format_elapsed(elapsed_ms),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(exports)} regions exported",
                metrics={
                    "regions": len(exports),
                    "records": exported,
                    "excluded": len(municipios) - exported,
                    "elapsed_ms": elapsed_ms,
                },
                warnings=[],
                artifacts={"out_dir": str(out_dir), "bin_dir": str(bin_dir)},
                payload={"regions": {x.uf: x.count for x in exports}},
            )

        except Exception as e:
            return failed_result(self, ctx, e)
