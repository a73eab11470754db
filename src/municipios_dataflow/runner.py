# src/municipios_dataflow/runner.py
"""
Pipeline Driver do Municípios DataFlow.

Orquestra uma run completa usando apenas APIs públicas do core:

    config resolvida → RunContext → StepRegistry → Engine → Manifest

O Manifest é criado explicitamente aqui (o Engine apenas registra
início e fim de cada Step) e persistido em `<work_dir>/<manifest_name>`.

Decisões arquiteturais:
    - `run_id` aleatório (uuid4), timestamps em UTC
    - O colaborador de download e o relógio do relatório de diff são
      injetáveis, o que permite runs sem rede nos testes
    - Os registros parseados ficam disponíveis no resultado para a
      consulta interativa, mesmo quando a exportação falha
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from municipios_dataflow import __version__
from municipios_dataflow.core.config import compute_config_hash
from municipios_dataflow.core.engine.engine import Engine, RunResult
from municipios_dataflow.core.exceptions import OutputWriteError
from municipios_dataflow.core.pipeline.context import EventSink, RunContext
from municipios_dataflow.core.pipeline.registry import StepRegistry
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.traceability.manifest import (
    RunManifest,
    create_manifest,
    finish_run,
    save_manifest,
)
from municipios_dataflow.domain.record import Municipio
from municipios_dataflow.io.fetch import Fetcher
from municipios_dataflow.steps.export.regions import ExportRegionsStep
from municipios_dataflow.steps.ingest.parse import IngestParseStep
from municipios_dataflow.steps.snapshot.acquire import SnapshotAcquireStep
from municipios_dataflow.steps.snapshot.diff import SnapshotDiffStep

DEFAULT_MANIFEST_NAME = "run_manifest.json"


@dataclass(frozen=True)
class PipelineOutcome:
    """Resultado de uma run: RunResult, contexto, Manifest e caminho do Manifest."""

    result: RunResult
    ctx: RunContext
    manifest: RunManifest
    manifest_path: Path

    @property
    def failed(self) -> bool:
        return self.result.failed

    @property
    def municipios(self) -> Tuple[Municipio, ...]:
        if self.ctx.has_artifact("data.municipios"):
            return self.ctx.get_artifact("data.municipios")
        return ()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_steps(
    *,
    fetcher: Optional[Fetcher] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> List[Step]:
    """Registra os Steps canônicos, na ordem do DAG."""
    diff = SnapshotDiffStep()
    if clock is not None:
        diff.clock = clock

    registry = StepRegistry()
    registry.add(SnapshotAcquireStep(fetcher=fetcher))
    registry.add(diff)
    registry.add(IngestParseStep())
    registry.add(ExportRegionsStep())
    return registry.list()


def run_pipeline(
    config: Dict[str, Any],
    work_dir: Union[str, Path],
    *,
    fetcher: Optional[Fetcher] = None,
    sink: Optional[EventSink] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> PipelineOutcome:
    """Executa o pipeline completo em `work_dir` e persiste o Manifest.

    Falhas de Steps não levantam exceção: ficam registradas no RunResult
    e no Manifest. Apenas a falha ao gravar o próprio Manifest é levantada.

    Raises:
        OutputWriteError: Se o Manifest não puder ser gravado.
    """
    work_dir = Path(work_dir)
    work_dir.mkdir(parents=True, exist_ok=True)

    ctx = RunContext(
        run_id=uuid.uuid4().hex,
        created_at=_utcnow(),
        config=config,
        meta={"work_dir": str(work_dir)},
        sink=sink,
    )

    manifest = create_manifest(
        run_id=ctx.run_id,
        started_at=ctx.created_at,
        version=__version__,
        config_hash=compute_config_hash(config),
    )

    result = Engine(steps=build_steps(fetcher=fetcher, clock=now), ctx=ctx, manifest=manifest).run()
    finish_run(manifest, ts=_utcnow(), events=ctx.events)

    run_cfg = config.get("run") or {}
    manifest_path = work_dir / (run_cfg.get("manifest_name") or DEFAULT_MANIFEST_NAME)
    try:
        save_manifest(manifest, manifest_path)
    except OSError as e:
        raise OutputWriteError(
            "Falha ao gravar o Manifest da run",
            details={"path": str(manifest_path), "reason": str(e)},
        ) from e

    return PipelineOutcome(result=result, ctx=ctx, manifest=manifest, manifest_path=manifest_path)
