# src/municipios_dataflow/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre Steps durante uma run.

O RunContext atua como o único meio permitido de:
    - troca indireta de informações entre Steps (artifact store)
    - registro de logs estruturados de execução (event log)
    - coleta de warnings não fatais associados a Steps

Chaves de artefatos usadas pelos Steps concretos:
    - `snapshot.base_path` / `snapshot.new_path` / `snapshot.active_path`
    - `snapshot.diff`
    - `data.municipios` (sequência imutável de registros, usada também pela consulta)
    - `export.regions`

Invariantes:
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`
    - Caminhos relativos são resolvidos a partir de `meta["work_dir"]`

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union


EventSink = Callable[[Dict[str, Any]], None]


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado de uma run do pipeline.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida
        - metadados (ex.: `work_dir`)
        - armazenamento de artefatos produzidos
        - event log estruturado
        - warnings associados a Steps específicos

    `sink`, quando presente, recebe cada evento no momento em que é
    registrado (a CLI o usa para ecoar progresso no console). O evento
    continua sendo acumulado em `events` independentemente do sink.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)
    sink: Optional[EventSink] = field(default=None, repr=False)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Paths
    # -----------------------------
    @property
    def work_dir(self) -> Path:
        return Path(self.meta.get("work_dir") or Path.cwd())

    def resolve_path(self, value: Union[str, Path]) -> Path:
        p = Path(value).expanduser()
        if not p.is_absolute():
            p = self.work_dir / p
        return p

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
        if self.sink is not None:
            self.sink(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
