# tests/domain/test_query.py
"""Testes do filtro da consulta interativa."""

from municipios_dataflow.domain.query import format_match, search_municipios
from municipios_dataflow.domain.record import parse_lines


def _records(rows):
    return parse_lines(rows)


def test_filter_by_uf_is_case_insensitive(snapshot_rows):
    found = search_municipios(_records(snapshot_rows), uf="sp")
    assert [m.ibge for m in found] == ["3550308", "3509502"]


def test_filter_by_name_part(snapshot_rows):
    found = search_municipios(_records(snapshot_rows), name_part="paulo")
    assert [m.nome_preferido for m in found] == ["São Paulo"]


def test_name_part_uses_preferred_name(snapshot_rows):
    # nome IBGE vazio: busca cai no nome TOM
    found = search_municipios(_records(snapshot_rows), name_part="salva")
    assert [m.ibge for m in found] == ["2927408"]


def test_filter_by_code_matches_ibge_or_tom(snapshot_rows):
    records = _records(snapshot_rows)

    assert [m.tom for m in search_municipios(records, code="5300108")] == ["0001"]
    assert [m.ibge for m in search_municipios(records, code="6291")] == ["3509502"]
    assert search_municipios(records, code="530010") == []


def test_filters_are_combined(snapshot_rows):
    records = _records(snapshot_rows)

    assert search_municipios(records, uf="SP", name_part="camp")[0].ibge == "3509502"
    assert search_municipios(records, uf="RJ", name_part="camp") == []


def test_blank_filters_are_ignored(snapshot_rows):
    records = _records(snapshot_rows)
    assert search_municipios(records, uf="  ", name_part="", code=None) == records


def test_excluded_region_is_searchable(snapshot_rows):
    found = search_municipios(_records(snapshot_rows), uf="EX")
    assert [m.nome_preferido for m in found] == ["EXTERIOR"]


def test_limit_caps_results():
    rows = [f"{i:04d};{3500000 + i};CIDADE {i};Cidade {i};SP" for i in range(120)]
    records = _records(rows)

    found = search_municipios(records, uf="SP")

    assert len(found) == 50
    assert found == records[:50]
    assert len(search_municipios(records, uf="SP", limit=5)) == 5


def test_collection_is_not_mutated(snapshot_rows):
    records = _records(snapshot_rows)
    before = list(records)

    search_municipios(records, uf="SP")

    assert records == before


def test_format_match(snapshot_rows):
    m = _records(snapshot_rows)[0]
    assert format_match(m) == "UF=DF | IBGE=5300108 | TOM=0001 | Nome=Brasília"
