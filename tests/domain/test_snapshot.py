# tests/domain/test_snapshot.py
"""
Testes da leitura de snapshots e do Line-Set Differ.

Os testes asseguram que:
- UTF-8 (com ou sem BOM) é lido diretamente
- conteúdo inválido em UTF-8 cai para Windows-1252
- CRLF, CR e LF são aceitos como terminadores
- o diff tem semântica de conjunto (duplicatas contam uma vez)
- o relatório só é gravado quando há diferenças, adições antes de remoções
"""

from datetime import datetime
from pathlib import Path

import pytest

from municipios_dataflow.core.exceptions import SnapshotDecodeError
from municipios_dataflow.domain.snapshot import (
    decode_snapshot,
    diff_lines,
    read_snapshot_lines,
    report_path,
    split_lines,
    write_change_report,
)

TS = datetime(2026, 3, 1, 14, 5, 9)


def test_split_lines_handles_all_terminators():
    assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("a\n\nb") == ["a", "", "b"]
    assert split_lines("") == []


def test_read_utf8_with_bom(tmp_path: Path):
    path = tmp_path / "s.csv"
    path.write_bytes("\ufeffTOM;IBGE\r\n0001;5300108;Brasília;Brasília;DF\r\n".encode("utf-8"))

    assert read_snapshot_lines(path) == ["TOM;IBGE", "0001;5300108;Brasília;Brasília;DF"]


def test_read_falls_back_to_cp1252(tmp_path: Path):
    path = tmp_path / "s.csv"
    path.write_bytes("0001;5300108;Brasília;Brasília;DF\n".encode("cp1252"))

    assert read_snapshot_lines(path) == ["0001;5300108;Brasília;Brasília;DF"]


def test_decode_reports_encoding_used():
    assert decode_snapshot("São".encode("utf-8")) == ("São", "utf-8-sig")
    assert decode_snapshot("São".encode("cp1252")) == ("São", "cp1252")


def test_undecodable_snapshot_raises(tmp_path: Path):
    path = tmp_path / "s.csv"
    # 0x81 é inválido em UTF-8 e não mapeado em Windows-1252
    path.write_bytes(b"\x81\x81")

    with pytest.raises(SnapshotDecodeError) as info:
        read_snapshot_lines(path)
    assert info.value.details["path"] == str(path)


def test_empty_file_has_no_lines(tmp_path: Path):
    path = tmp_path / "s.csv"
    path.write_bytes(b"")
    assert read_snapshot_lines(path) == []


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_snapshot_lines(tmp_path / "missing.csv")


def test_reference_diff():
    diff = diff_lines(["A;1", "B;2"], ["A;1", "C;3"])

    assert diff.added_set == {"C;3"}
    assert diff.removed_set == {"B;2"}


def test_identical_snapshots_have_empty_diff():
    diff = diff_lines(["A;1", "B;2"], ["B;2", "A;1"])
    assert diff.is_empty


def test_diff_is_symmetric():
    base, new = ["A;1", "B;2", "D;4"], ["A;1", "C;3"]

    forward = diff_lines(base, new)
    backward = diff_lines(new, base)

    assert forward.added_set == backward.removed_set
    assert forward.removed_set == backward.added_set


def test_duplicates_count_once_in_first_occurrence_order():
    diff = diff_lines(["A"], ["C", "B", "C", "A", "B"])
    assert diff.added == ("C", "B")


def test_diff_is_ordinal():
    diff = diff_lines(["a;1"], ["A;1", "a;1 "])
    assert diff.added_set == {"A;1", "a;1 "}


def test_report_path_format(tmp_path: Path):
    assert report_path(tmp_path, TS) == tmp_path / "municipios_diff_20260301_140509.csv"


def test_write_change_report(tmp_path: Path):
    diff = diff_lines(["A;1", "B;2"], ["A;1", "C;3"])

    path = write_change_report(diff, tmp_path, TS)

    raw = path.read_bytes()
    assert not raw.startswith(b"\xef\xbb\xbf")
    assert raw.decode("utf-8").splitlines() == ["CHANGE;LINE", "+;C;3", "-;B;2"]


def test_additions_are_written_before_removals(tmp_path: Path):
    diff = diff_lines(["R1", "R2"], ["N1"])

    lines = write_change_report(diff, tmp_path, TS).read_text(encoding="utf-8").splitlines()

    assert lines == ["CHANGE;LINE", "+;N1", "-;R1", "-;R2"]


def test_no_report_when_no_differences(tmp_path: Path):
    assert write_change_report(diff_lines(["A"], ["A"]), tmp_path, TS) is None
    assert list(tmp_path.iterdir()) == []
