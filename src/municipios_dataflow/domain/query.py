# src/municipios_dataflow/domain/query.py
"""
Consulta interativa sobre a coleção de municípios em memória.

Filtros (todos opcionais, combinados com AND; filtros em branco são ignorados):
    - uf:        igualdade case-insensitive
    - name_part: substring case-insensitive do nome preferido
    - code:      igualdade case-insensitive com IBGE ou TOM

Registros de UF "EX" participam da consulta, embora não sejam exportados.
A coleção nunca é modificada.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from municipios_dataflow.domain.record import Municipio

DEFAULT_LIMIT = 50


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def matches(
    municipio: Municipio,
    *,
    uf: Optional[str] = None,
    name_part: Optional[str] = None,
    code: Optional[str] = None,
) -> bool:
    uf_key = _norm(uf)
    if uf_key and municipio.uf.casefold() != uf_key:
        return False

    name_key = _norm(name_part)
    if name_key and name_key not in municipio.nome_preferido.casefold():
        return False

    code_key = _norm(code)
    if code_key and code_key not in (municipio.ibge.casefold(), municipio.tom.casefold()):
        return False

    return True


def search_municipios(
    municipios: Iterable[Municipio],
    uf: Optional[str] = None,
    name_part: Optional[str] = None,
    code: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> List[Municipio]:
    """Retorna até `limit` municípios que atendem aos filtros, na ordem da coleção."""
    if limit <= 0:
        return []

    found: List[Municipio] = []
    for m in municipios:
        if matches(m, uf=uf, name_part=name_part, code=code):
            found.append(m)
            if len(found) >= limit:
                break
    return found


def format_match(municipio: Municipio) -> str:
    return (
        f"UF={municipio.uf} | IBGE={municipio.ibge} | "
        f"TOM={municipio.tom} | Nome={municipio.nome_preferido}"
    )
