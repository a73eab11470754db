"""Step canônico: snapshot.acquire (v1).

Responsabilidades:
- garantir a existência do snapshot base no diretório de trabalho
- baixar o CSV de origem (tentativa única) quando `fetch` está habilitado
- publicar os caminhos `snapshot.base_path`, `snapshot.new_path` e
  `snapshot.active_path`

Política de aquisição:
- base ausente → o download é gravado como base
- base presente → o download é gravado como novo snapshot
- `fetch: false` → nenhum acesso à rede; o base precisa existir
- snapshot ativo = novo quando existir, senão base

Limites explícitos (v1):
- NÃO promove o novo snapshot a base
- NÃO faz retry de download
- NÃO decodifica nem valida o conteúdo baixado
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import List, Optional

from municipios_dataflow.core.config import step_config
from municipios_dataflow.core.exceptions import SnapshotNotFound
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.step import Step
from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from municipios_dataflow.io.fetch import DEFAULT_TIMEOUT, Fetcher, download_file
from municipios_dataflow.steps._result import failed_result

DEFAULT_BASE_NAME = "municipios_base.csv"
DEFAULT_NEW_NAME = "municipios_new.csv"


@dataclass
class SnapshotAcquireStep(Step):
    """Obtém os snapshots base/novo; `fetcher` substitui o download real (testes)."""

    id: str = "snapshot.acquire"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]
    fetcher: Optional[Fetcher] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def _fetcher(self, timeout: float) -> Fetcher:
        if self.fetcher is not None:
            return self.fetcher
        return partial(download_file, timeout=timeout)

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx.config, self.id)

        try:
            base_path = ctx.resolve_path(cfg.get("base_name") or DEFAULT_BASE_NAME)
            new_path = ctx.resolve_path(cfg.get("new_name") or DEFAULT_NEW_NAME)
            fetch = bool(cfg.get("fetch", True))

            fetched_into: Optional[Path] = None
            if fetch:
                url = cfg.get("url")
                if not isinstance(url, str) or not url.strip():
                    raise ValueError(f"Missing required config: steps.{self.id}.url")

                fetched_into = new_path if base_path.exists() else base_path
                ctx.log(
                    step_id=self.id,
                    level="info",
                    message="downloading source csv",
                    url=url,
                    dest=str(fetched_into),
                )
                self._fetcher(float(cfg.get("timeout_seconds", DEFAULT_TIMEOUT)))(url, fetched_into)

            elif not base_path.exists():
                raise SnapshotNotFound(
                    "Snapshot base não encontrado",
                    details={"path": str(base_path)},
                    hint="Habilite o download ou coloque o snapshot base no diretório de trabalho.",
                )

            active_path = new_path if new_path.exists() else base_path

            ctx.set_artifact("snapshot.base_path", base_path)
            ctx.set_artifact("snapshot.new_path", new_path)
            ctx.set_artifact("snapshot.active_path", active_path)

            ctx.log(
                step_id=self.id,
                level="info",
                message="snapshot acquired",
                active_path=str(active_path),
                fetched=fetched_into is not None,
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="snapshot acquired",
                metrics={
                    "fetched": int(fetched_into is not None),
                    "active_bytes": active_path.stat().st_size,
                },
                warnings=[],
                artifacts={
                    "base_path": str(base_path),
                    "new_path": str(new_path),
                    "active_path": str(active_path),
                },
                payload={"fetched_into": str(fetched_into) if fetched_into else None},
            )

        except Exception as e:
            return failed_result(self, ctx, e)
