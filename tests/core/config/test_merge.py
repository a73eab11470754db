# tests/core/config/test_merge.py
"""
Testes do deep-merge de configuração.

Política validada:
    - dict + dict → merge recursivo
    - list        → substituição integral
    - escalar     → substituição
    - tipos incompatíveis → ConfigTypeConflictError
    - None no default aceita qualquer tipo no override

Invariantes:
    - Os dicionários de entrada nunca são mutados
"""

import pytest

from municipios_dataflow.core.config.errors import ConfigTypeConflictError
from municipios_dataflow.core.config.merge import deep_merge


def test_nested_dicts_are_merged_recursively():
    base = {"steps": {"snapshot.acquire": {"fetch": True, "timeout_seconds": 60}}}
    override = {"steps": {"snapshot.acquire": {"fetch": False}}}

    out = deep_merge(base, override)

    assert out == {"steps": {"snapshot.acquire": {"fetch": False, "timeout_seconds": 60}}}


def test_lists_are_replaced_not_concatenated():
    base = {"steps": {"export.regions": {"excluded_regions": ["EX"]}}}
    override = {"steps": {"export.regions": {"excluded_regions": ["EX", "DF"]}}}

    out = deep_merge(base, override)

    assert out["steps"]["export.regions"]["excluded_regions"] == ["EX", "DF"]


def test_new_keys_are_added():
    out = deep_merge({"engine": {"fail_fast": True}}, {"query": {"limit": 10}})
    assert out == {"engine": {"fail_fast": True}, "query": {"limit": 10}}


def test_type_conflict_raises():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"steps": {"export.regions": {"iterations": 50000}}},
                   {"steps": {"export.regions": {"iterations": "many"}}})


def test_none_default_accepts_any_type():
    out = deep_merge({"run": {"manifest_name": None}}, {"run": {"manifest_name": "m.json"}})
    assert out["run"]["manifest_name"] == "m.json"


def test_inputs_are_not_mutated():
    base = {"steps": {"ingest.parse": {"header_markers": ["TOM", "IBGE"]}}}
    override = {"steps": {"ingest.parse": {"header_markers": ["UF"]}}}

    deep_merge(base, override)

    assert base["steps"]["ingest.parse"]["header_markers"] == ["TOM", "IBGE"]
    assert override["steps"]["ingest.parse"]["header_markers"] == ["UF"]


def test_root_must_be_dicts():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({}, [])  # type: ignore[arg-type]
