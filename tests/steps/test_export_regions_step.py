# tests/steps/test_export_regions_step.py
"""
Testes do Step export.regions.

Usa iterações PBKDF2 reduzidas via config; a política de derivação
é a mesma da execução real.
"""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path

from municipios_dataflow.core.errors import OUTPUT_WRITE_ERROR
from municipios_dataflow.core.pipeline.context import RunContext
from municipios_dataflow.core.pipeline.types import StepStatus
from municipios_dataflow.domain.derivation import DEFAULT_PEPPER
from municipios_dataflow.domain.record import parse_lines
from municipios_dataflow.steps.export.regions import ExportRegionsStep
from tests.fixtures.snapshots import SNAPSHOT_ROWS


def _make_ctx(work_dir: Path, rows=SNAPSHOT_ROWS, **step_cfg) -> RunContext:
    cfg = {"iterations": 10, "progress_every": 1}
    cfg.update(step_cfg)
    ctx = RunContext(
        run_id="test",
        created_at=datetime.now(timezone.utc),
        config={"steps": {"export.regions": cfg}},
        meta={"work_dir": str(work_dir)},
    )
    ctx.set_artifact("data.municipios", tuple(parse_lines(rows)))
    return ctx


def test_export_writes_files_per_region(tmp_path: Path):
    ctx = _make_ctx(tmp_path)

    sr = ExportRegionsStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert sr.metrics["regions"] == 4
    assert sr.metrics["records"] == 5
    assert sr.metrics["excluded"] == 1
    assert sr.payload["regions"] == {"BA": 1, "DF": 1, "RJ": 1, "SP": 2}
    assert sorted(p.name for p in (tmp_path / "mun_hash_por_uf").iterdir()) == [
        f"municipios_hash_{uf}.{ext}" for uf in ("BA", "DF", "RJ", "SP") for ext in ("csv", "json")
    ]
    assert sorted(p.name for p in (tmp_path / "mun_bin_por_uf").iterdir()) == [
        f"municipios_{uf}.bin" for uf in ("BA", "DF", "RJ", "SP")
    ]


def test_exported_hash_uses_configured_parameters(tmp_path: Path):
    ctx = _make_ctx(tmp_path, rows=["0001;5300108;Brasília;Brasília;DF"], hash_bytes=16)

    ExportRegionsStep().run(ctx)

    doc = json.loads((tmp_path / "mun_hash_por_uf" / "municipios_hash_DF.json").read_text(encoding="utf-8"))
    expected = hashlib.pbkdf2_hmac(
        "sha256",
        "0001;5300108;Brasília;Brasília;DF".encode("utf-8"),
        ("5300108" + DEFAULT_PEPPER).encode("utf-8"),
        10,
        dklen=16,
    ).hex()
    assert doc == [{
        "Tom": "0001",
        "Ibge": "5300108",
        "NomeTom": "Brasília",
        "NomeIbge": "Brasília",
        "Uf": "DF",
        "Hash": expected,
    }]


def test_progress_and_region_events_are_logged(tmp_path: Path):
    ctx = _make_ctx(tmp_path)

    ExportRegionsStep().run(ctx)

    progress = [e for e in ctx.events if "done" in e]
    assert [(e["region"], e["done"], e["total"]) for e in progress] == [
        ("BA", 1, 1), ("DF", 1, 1), ("RJ", 1, 1), ("SP", 1, 2), ("SP", 2, 2),
    ]
    assert progress[0]["message"].startswith("[BA] 1/1 (0m ")
    regions_done = [e["region"] for e in ctx.events if "count" in e]
    assert regions_done == ["BA", "DF", "RJ", "SP"]


def test_output_dirs_are_configurable(tmp_path: Path):
    ctx = _make_ctx(tmp_path, out_dir="out", bin_dir=str(tmp_path / "bin"))

    sr = ExportRegionsStep().run(ctx)

    assert sr.artifacts == {"out_dir": str(tmp_path / "out"), "bin_dir": str(tmp_path / "bin")}
    assert (tmp_path / "out" / "municipios_hash_SP.csv").exists()
    assert (tmp_path / "bin" / "municipios_SP.bin").exists()


def test_write_failure_fails_step(tmp_path: Path):
    (tmp_path / "mun_hash_por_uf").write_text("blocker", encoding="utf-8")
    ctx = _make_ctx(tmp_path)

    sr = ExportRegionsStep().run(ctx)

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == OUTPUT_WRITE_ERROR


def test_missing_records_fail(tmp_path: Path):
    ctx = RunContext(run_id="t", created_at=datetime.now(timezone.utc), config={}, meta={"work_dir": str(tmp_path)})

    sr = ExportRegionsStep().run(ctx)

    assert sr.status == StepStatus.FAILED
