# tests/conftest.py
"""
Fixtures compartilhados para testes do Municípios DataFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais do core
- snapshots CSV sintéticos e um fetcher falso (sem rede)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança
    - I/O acontece apenas sob `tmp_path`

Invariantes:
    - Nenhuma fixture acessa a rede
    - Nenhuma fixture depende de variáveis de ambiente
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tests.fixtures.snapshots import SNAPSHOT_ROWS


# =====================================================
# Snapshots sintéticos
# =====================================================

@pytest.fixture
def snapshot_rows() -> list:
    return list(SNAPSHOT_ROWS)


@pytest.fixture
def fake_fetcher():
    """
    Fixture factory de fetcher falso.

    Retorna uma função `make(content)` que produz um callable com a mesma
    assinatura do colaborador de download (`(url, dest) -> Path`). Cada
    chamada grava `content` em `dest` e é registrada em `calls`.
    """

    def make(content: str):
        calls = []

        def fetch(url, dest):
            calls.append((url, Path(dest)))
            Path(dest).parent.mkdir(parents=True, exist_ok=True)
            Path(dest).write_text(content, encoding="utf-8", newline="")
            return Path(dest)

        fetch.calls = calls
        return fetch

    return make


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """YAML de defaults semelhante ao `defaults.yaml` empacotado (reduzido)."""
    return """\
engine:
  fail_fast: true
steps:
  snapshot.acquire:
    enabled: true
    fetch: true
  export.regions:
    enabled: true
    iterations: 50000
    excluded_regions:
      - EX
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de overrides locais: desliga o download e reduz as iterações."""
    return """\
steps:
  snapshot.acquire:
    fetch: false
  export.regions:
    iterations: 10
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """Configuração mínima já resolvida para testes do engine."""
    return {
        "engine": {"fail_fast": True},
        "steps": {"snapshot.acquire": {"enabled": True}},
    }


@pytest.fixture
def dummy_ctx(dummy_config, tmp_path):
    """RunContext determinístico com `work_dir` isolado em `tmp_path`."""
    from municipios_dataflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"work_dir": str(tmp_path), "source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    A classe retornada expõe `id`, `kind` e `depends_on` e, ao executar,
    registra o artefato `<id>.ok` no RunContext e retorna SUCCESS.
    """
    from municipios_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "snapshot.acquire",
            kind: StepKind = StepKind.DIAGNOSTIC,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep
