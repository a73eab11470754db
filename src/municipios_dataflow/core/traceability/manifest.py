# src/municipios_dataflow/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade de execuções do Municípios DataFlow.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run_id, início, fim, duração, versão)
    - hash da configuração efetiva
    - estado incremental dos Steps (status, summary, métricas, duração)
    - Event Log ordenado (eventos explícitos do Manifest + eventos do RunContext)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON indentado, UTF-8
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from municipios_dataflow.core.pipeline.types import StepResult


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunManifest:
    """
    Registro de uma execução do pipeline.

    Campos principais:
        - run: metadados da execução (run_id, started_at, finished_at, duration_ms, version)
        - inputs: hash da configuração efetiva
        - steps: estado incremental de cada Step, indexado por step_id
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run") or {}),
            inputs=dict(data.get("inputs") or {}),
            steps={k: dict(v) for k, v in (data.get("steps") or {}).items()},
            events=[dict(e) for e in (data.get("events") or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
) -> RunManifest:
    """Cria o Manifest inicial de uma run (steps e events vazios)."""
    return RunManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "finished_at": None,
            "duration_ms": None,
            "version": version,
        },
        inputs={"config_hash": config_hash},
    )


def add_event(
    manifest: RunManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    event: Dict[str, Any] = {"type": event_type, "ts": _iso(ts)}
    if step_id is not None:
        event["step_id"] = step_id
    if payload:
        event["payload"] = dict(payload)
    manifest.events.append(event)


def step_started(manifest: RunManifest, *, step_id: str, kind: str, ts: datetime) -> None:
    manifest.steps[step_id] = {
        "kind": kind,
        "status": "running",
        "started_at": _iso(ts),
    }
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id)


def step_finished(manifest: RunManifest, *, result: StepResult, ts: datetime) -> None:
    """Registra o resultado final de um Step (success, skipped ou failed).

    Steps pulados antes de iniciar (config ou dependência falha) não possuem
    `started_at`; nesse caso a duração é omitida.
    """
    entry = manifest.steps.setdefault(result.step_id, {})
    entry.update(
        {
            "kind": getattr(result.kind, "value", result.kind),
            "status": getattr(result.status, "value", result.status),
            "summary": result.summary,
            "metrics": dict(result.metrics),
            "warnings": list(result.warnings),
            "artifacts": dict(result.artifacts),
            "finished_at": _iso(ts),
        }
    )
    if "error" in result.payload:
        entry["error"] = result.payload["error"]
    started = entry.get("started_at")
    if started:
        entry["duration_ms"] = _ms_between(datetime.fromisoformat(started), ts)

    add_event(
        manifest,
        event_type=f"step_{entry['status']}",
        ts=ts,
        step_id=result.step_id,
    )


def finish_run(manifest: RunManifest, *, ts: datetime, events: Optional[List[Dict[str, Any]]] = None) -> None:
    """Fecha a run: registra fim, duração total e anexa o event log do RunContext."""
    manifest.run["finished_at"] = _iso(ts)
    manifest.run["duration_ms"] = _ms_between(datetime.fromisoformat(manifest.run["started_at"]), ts)
    for ev in events or []:
        ev_ts = datetime.fromisoformat(ev["timestamp"]) if ev.get("timestamp") else ts
        add_event(manifest, event_type="log", ts=ev_ts, step_id=ev.get("step_id"), payload=ev)


def save_manifest(manifest: RunManifest, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(manifest.to_dict(), f, ensure_ascii=False, indent=2, default=str)


def load_manifest(path: Path) -> RunManifest:
    with path.open("r", encoding="utf-8") as f:
        return RunManifest.from_dict(json.load(f))
