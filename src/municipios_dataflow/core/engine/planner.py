# src/municipios_dataflow/core/engine/planner.py
"""
Ordem de execução dos Steps a partir de `depends_on`.

O pipeline de municípios é uma cadeia curta
(snapshot.acquire → snapshot.diff → ingest.parse → export.regions), mas a
ordem nunca é a de registro: ela sai do grafo de dependências, de modo que
um Step adicionado fora de ordem no `StepRegistry` ainda roda no lugar certo.

Empates entre Steps prontos são resolvidos pelo `step.id` em ordem
lexicográfica; um id desconhecido em `depends_on` ou um ciclo impedem a run
antes que qualquer snapshot seja tocado.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from municipios_dataflow.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um Step declarou em `depends_on` um `step.id` inexistente."""


class CycleDetectedError(ValueError):
    """O grafo de dependências contém um ciclo; nenhuma ordem válida existe."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística de Steps.

    Sempre que múltiplos Steps estiverem prontos para execução, a escolha
    é feita por ordem lexicográfica do `step.id`.

    Args:
        steps (Iterable[Step]): Coleção de Steps declarativos do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica determinística.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d

    incoming_count: Dict[str, int] = {sid: len(d) for sid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(sid)

    ready: List[str] = sorted(sid for sid, c in incoming_count.items() if c == 0)
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in sorted(outgoing[sid]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order_ids) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order_ids]
