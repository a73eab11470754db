# tests/net/test_fetch.py
"""
Testes do colaborador de download (`requests` substituído via monkeypatch).

Invariantes:
    - uma única tentativa (sem retry)
    - o corpo é gravado em bytes, sem decodificação
    - qualquer falha de rede ou HTTP vira SnapshotFetchError
    - uma transferência interrompida não deixa arquivo em `dest`
"""

from pathlib import Path

import pytest
import requests

from municipios_dataflow.core.exceptions import SnapshotFetchError
from municipios_dataflow.io import fetch


class FakeResponse:
    def __init__(self, body: bytes, status_code: int = 200, fail_after: int = None):
        self.body = body
        self.status_code = status_code
        self.fail_after = fail_after
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def iter_content(self, chunk_size):
        for i in range(0, len(self.body), chunk_size):
            if self.fail_after is not None and i >= self.fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection broken")
            yield self.body[i:i + chunk_size]


def test_download_writes_body(tmp_path: Path, monkeypatch):
    body = "TOM;IBGE\n0001;5300108;Brasília;Brasília;DF\n".encode("cp1252")
    calls = []

    def fake_get(url, timeout, stream):
        calls.append((url, timeout, stream))
        return FakeResponse(body)

    monkeypatch.setattr(fetch.requests, "get", fake_get)

    dest = fetch.download_file("https://example.test/m.csv", tmp_path / "sub" / "base.csv", timeout=5)

    assert dest.read_bytes() == body
    assert calls == [("https://example.test/m.csv", 5, True)]
    assert not fetch.partial_path(dest).exists()


def test_http_error_raises_fetch_error(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(fetch.requests, "get", lambda url, timeout, stream: FakeResponse(b"", 503))

    with pytest.raises(SnapshotFetchError) as info:
        fetch.download_file("https://example.test/m.csv", tmp_path / "base.csv")

    assert info.value.details["status_code"] == 503
    assert not (tmp_path / "base.csv").exists()


def test_network_error_raises_fetch_error(tmp_path: Path, monkeypatch):
    calls = []

    def boom(url, timeout, stream):
        calls.append(url)
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(fetch.requests, "get", boom)

    with pytest.raises(SnapshotFetchError) as info:
        fetch.download_file("https://example.test/m.csv", tmp_path / "base.csv")

    assert len(calls) == 1
    assert info.value.details["url"] == "https://example.test/m.csv"
    assert info.value.details["status_code"] is None


def test_interrupted_download_leaves_no_file(tmp_path: Path, monkeypatch):
    body = "TOM;IBGE;NomeTOM;NomeIBGE;UF\n0001;5300108;Brasília;Brasília;DF\n".encode("utf-8")
    response = FakeResponse(body, fail_after=16)
    monkeypatch.setattr(fetch.requests, "get", lambda url, timeout, stream: response)
    monkeypatch.setattr(fetch, "CHUNK_SIZE", 16)

    dest = tmp_path / "municipios_base.csv"
    with pytest.raises(SnapshotFetchError):
        fetch.download_file("https://example.test/m.csv", dest)

    assert not dest.exists()
    assert not fetch.partial_path(dest).exists()
    assert response.closed


def test_interrupted_download_keeps_previous_file(tmp_path: Path, monkeypatch):
    dest = tmp_path / "municipios_new.csv"
    dest.write_bytes(b"0001;5300108;Brasilia;Brasilia;DF\n")

    response = FakeResponse(b"TOM;IBGE;...\n0001;5300108;Bras" * 4, fail_after=16)
    monkeypatch.setattr(fetch.requests, "get", lambda url, timeout, stream: response)
    monkeypatch.setattr(fetch, "CHUNK_SIZE", 16)

    with pytest.raises(SnapshotFetchError):
        fetch.download_file("https://example.test/m.csv", dest)

    assert dest.read_bytes() == b"0001;5300108;Brasilia;Brasilia;DF\n"
    assert not fetch.partial_path(dest).exists()


def test_response_is_closed_after_success(tmp_path: Path, monkeypatch):
    response = FakeResponse(b"0001;5300108;Brasilia;Brasilia;DF\n")
    monkeypatch.setattr(fetch.requests, "get", lambda url, timeout, stream: response)

    fetch.download_file("https://example.test/m.csv", tmp_path / "base.csv")

    assert response.closed
