# src/municipios_dataflow/cli.py
"""Interface de linha de comando do Municípios DataFlow.

Comandos:
    run    → executa o pipeline completo e, opcionalmente, abre a consulta interativa
    query  → parseia o snapshot ativo (sem download nem exportação) e abre a consulta
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import click

from municipios_dataflow import __version__
from municipios_dataflow.core.config import load_config
from municipios_dataflow.core.config.errors import ConfigError
from municipios_dataflow.core.exceptions import MunicipiosException
from municipios_dataflow.core.pipeline.types import StepStatus
from municipios_dataflow.domain.query import DEFAULT_LIMIT, format_match, search_municipios
from municipios_dataflow.domain.record import Municipio
from municipios_dataflow.runner import PipelineOutcome, run_pipeline


def _echo_event(event: Dict[str, Any]) -> None:
    line = f"[{event.get('step_id')}] {event.get('message')}"
    click.echo(line, err=event.get("level") == "error")


def _load(config_path: Optional[str], overrides: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return load_config(local_path=config_path, overrides=overrides)
    except ConfigError as e:
        click.echo(f"Erro de configuração: {e}", err=True)
        raise SystemExit(2)


def _run(config: Dict[str, Any], work_dir: str) -> PipelineOutcome:
    try:
        return run_pipeline(config, work_dir, sink=_echo_event)
    except MunicipiosException as e:
        click.echo(f"Erro: {e}", err=True)
        raise SystemExit(1)


def _print_summary(outcome: PipelineOutcome) -> None:
    click.echo()
    click.echo("===== RESUMO =====")
    for step_id, result in outcome.result.steps.items():
        click.echo(f"{step_id}: {result.status.value} - {result.summary}")
        error = result.payload.get("error")
        if error and error.get("hint"):
            click.echo(f"  dica: {error['hint']}", err=True)
    click.echo(f"Manifest: {outcome.manifest_path}")


def query_loop(municipios: Sequence[Municipio], limit: int = DEFAULT_LIMIT) -> None:
    """Consulta interativa; UF vazia encerra o loop."""
    click.echo()
    click.echo("Pesquisar municípios (UF, parte do nome, IBGE ou TOM). Deixe UF vazio para sair.")
    while True:
        uf = click.prompt("UF (opcional)", default="", show_default=False).strip()
        if not uf:
            break
        name_part = click.prompt("Parte do nome (opcional)", default="", show_default=False)
        code = click.prompt("Código (IBGE ou TOM) (opcional)", default="", show_default=False)

        found = search_municipios(municipios, uf=uf, name_part=name_part, code=code, limit=limit)
        click.echo(f"Encontrados: {len(found)} (mostrando até {limit})")
        for m in found:
            click.echo(format_match(m))
        click.echo()


def _query_limit(config: Dict[str, Any]) -> int:
    return int((config.get("query") or {}).get("limit", DEFAULT_LIMIT))


@click.group()
@click.version_option(__version__, prog_name="municipios-dataflow")
def main():
    """Municípios DataFlow: diff, hash e exportação por UF do cadastro de municípios."""


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Arquivo YAML/JSON com overrides de configuração.")
@click.option("--work-dir", default=".", show_default=True, type=click.Path(file_okay=False),
              help="Diretório dos snapshots e das saídas.")
@click.option("--no-fetch", is_flag=True, help="Não baixa o CSV; usa os snapshots existentes.")
@click.option("--iterations", type=click.IntRange(min=1), default=None,
              help="Iterações PBKDF2 (default da configuração: 50000).")
@click.option("--query/--no-query", default=True, show_default=True,
              help="Abre a consulta interativa ao final.")
def run(config_path: Optional[str], work_dir: str, no_fetch: bool, iterations: Optional[int], query: bool):
    """Executa o pipeline: aquisição, diff, parsing e exportação por UF."""
    overrides: Dict[str, Any] = {}
    if no_fetch:
        overrides.setdefault("steps", {})["snapshot.acquire"] = {"fetch": False}
    if iterations is not None:
        overrides.setdefault("steps", {})["export.regions"] = {"iterations": iterations}

    config = _load(config_path, overrides)
    outcome = _run(config, work_dir)
    _print_summary(outcome)

    parsed = outcome.result.steps.get("ingest.parse")
    if query and parsed is not None and parsed.status == StepStatus.SUCCESS:
        query_loop(outcome.municipios, _query_limit(config))

    if outcome.failed:
        raise SystemExit(1)


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Arquivo YAML/JSON com overrides de configuração.")
@click.option("--work-dir", default=".", show_default=True, type=click.Path(file_okay=False),
              help="Diretório dos snapshots.")
def query(config_path: Optional[str], work_dir: str):
    """Consulta interativa sobre o snapshot ativo, sem download nem exportação."""
    overrides = {
        "steps": {
            "snapshot.acquire": {"fetch": False},
            "snapshot.diff": {"enabled": False},
            "export.regions": {"enabled": False},
        }
    }
    config = _load(config_path, overrides)
    outcome = _run(config, work_dir)

    if outcome.failed:
        _print_summary(outcome)
        raise SystemExit(1)

    click.echo(f"{len(outcome.municipios)} municípios carregados de {Path(work_dir).resolve()}")
    query_loop(outcome.municipios, _query_limit(config))


if __name__ == "__main__":
    main()
