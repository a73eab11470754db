# src/municipios_dataflow/domain/export.py
"""
Exportação particionada por UF em três formatos sincronizados.

Para cada UF (exceto as excluídas, por padrão "EX"), em ordem alfabética
case-insensitive de UF:

    1. Ordena os municípios por nome preferido (case-insensitive)
    2. CSV  `<out_dir>/municipios_hash_<UF>.csv`  — TOM;IBGE;NomeTOM;NomeIBGE;UF;Hash
    3. JSON `<out_dir>/municipios_hash_<UF>.json` — lista de objetos (Tom, Ibge, NomeTom, NomeIbge, Uf, Hash)
    4. BIN  `<bin_dir>/municipios_<UF>.bin`       — layout binário sem hash

A linha i de cada formato refere-se sempre ao mesmo município.

Layout binário:
    int32 little-endian com a quantidade de registros; para cada registro,
    os cinco campos (TOM, IBGE, NomeTOM, NomeIBGE, UF) como strings
    prefixadas pelo tamanho em bytes UTF-8, codificado em 7 bits por byte
    (LEB128, bit alto = continuação). Sem padding.
"""

from __future__ import annotations

import json
import struct
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterable, List, Optional, Sequence

from municipios_dataflow.core.exceptions import OutputWriteError
from municipios_dataflow.domain.record import Municipio

CSV_HEADER = "TOM;IBGE;NomeTOM;NomeIBGE;UF;Hash"
JSON_KEYS = ("Tom", "Ibge", "NomeTom", "NomeIbge", "Uf", "Hash")
DEFAULT_EXCLUDED_REGIONS = ("EX",)
DEFAULT_PROGRESS_EVERY = 50

_COUNT = struct.Struct("<i")

HashFn = Callable[[Municipio], str]
ProgressFn = Callable[[str, int, int, int], None]


@dataclass(frozen=True)
class HashedMunicipio:
    municipio: Municipio
    hash: str

    def csv_row(self) -> str:
        return ";".join(self.municipio.fields() + (self.hash,))

    def to_json(self) -> Dict[str, str]:
        return dict(zip(JSON_KEYS, self.municipio.fields() + (self.hash,)))


@dataclass(frozen=True)
class RegionExport:
    """Resumo dos arquivos gerados para uma UF."""

    uf: str
    count: int
    csv_path: Path
    json_path: Path
    bin_path: Path
    elapsed_ms: int


def format_elapsed(ms: int) -> str:
    """Formata milissegundos como "{m}m {s}s {ms}ms" (minutos módulo hora)."""
    ms = max(0, int(ms))
    minutes = (ms // 60_000) % 60
    seconds = (ms // 1000) % 60
    return f"{minutes}m {seconds}s {ms % 1000}ms"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


# ---------------------------------------------------------------------------
# Agrupamento
# ---------------------------------------------------------------------------

def group_by_region(
    municipios: Iterable[Municipio],
    excluded: Iterable[str] = DEFAULT_EXCLUDED_REGIONS,
) -> Dict[str, List[Municipio]]:
    """Agrupa por UF (case-insensitive), remove UFs excluídas e ordena.

    As chaves do dicionário retornado já estão em ordem alfabética
    case-insensitive; cada grupo está ordenado por nome preferido
    (ordenação estável: empates mantêm a ordem de origem).
    """
    excluded_keys = {e.upper() for e in excluded}
    groups: Dict[str, List[Municipio]] = {}
    for m in municipios:
        key = m.uf.upper()
        if key in excluded_keys:
            continue
        groups.setdefault(key, []).append(m)

    return {
        uf: sorted(groups[uf], key=lambda m: m.nome_preferido.casefold())
        for uf in sorted(groups, key=str.casefold)
    }


def output_paths(uf: str, out_dir: Path, bin_dir: Path) -> Dict[str, Path]:
    return {
        "csv": Path(out_dir) / f"municipios_hash_{uf}.csv",
        "json": Path(out_dir) / f"municipios_hash_{uf}.json",
        "bin": Path(bin_dir) / f"municipios_{uf}.bin",
    }


# ---------------------------------------------------------------------------
# Writers / readers
# ---------------------------------------------------------------------------

def write_region_csv(path: Path, rows: Sequence[HashedMunicipio]) -> None:
    with Path(path).open("w", encoding="utf-8", newline="\n") as f:
        f.write(CSV_HEADER + "\n")
        for row in rows:
            f.write(row.csv_row() + "\n")


def write_region_json(path: Path, rows: Sequence[HashedMunicipio]) -> None:
    with Path(path).open("w", encoding="utf-8", newline="\n") as f:
        json.dump([r.to_json() for r in rows], f, ensure_ascii=False, indent=2)


def _write_7bit_int(stream: BinaryIO, value: int) -> None:
    while value >= 0x80:
        stream.write(bytes(((value & 0x7F) | 0x80,)))
        value >>= 7
    stream.write(bytes((value,)))


def _read_7bit_int(stream: BinaryIO) -> int:
    result = 0
    shift = 0
    while True:
        b = stream.read(1)
        if not b:
            raise EOFError("truncated length prefix")
        byte = b[0]
        result |= (byte & 0x7F) << shift
        if byte < 0x80:
            return result
        shift += 7
        if shift > 28:
            raise ValueError("invalid 7-bit encoded length")


def write_string(stream: BinaryIO, value: str) -> None:
    data = (value or "").encode("utf-8")
    _write_7bit_int(stream, len(data))
    stream.write(data)


def read_string(stream: BinaryIO) -> str:
    size = _read_7bit_int(stream)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError("truncated string payload")
    return data.decode("utf-8")


def write_region_bin(path: Path, municipios: Sequence[Municipio]) -> None:
    with Path(path).open("wb") as f:
        f.write(_COUNT.pack(len(municipios)))
        for m in municipios:
            for value in m.fields():
                write_string(f, value)


def read_region_bin(path: Path) -> List[Municipio]:
    with Path(path).open("rb") as f:
        header = f.read(_COUNT.size)
        if len(header) != _COUNT.size:
            raise EOFError("truncated record count")
        (count,) = _COUNT.unpack(header)
        # campos lidos sem nova sanitização: o arquivo guarda valores já normalizados
        return [Municipio(*(read_string(f) for _ in range(5))) for _ in range(count)]


# ---------------------------------------------------------------------------
# Exportação
# ---------------------------------------------------------------------------

def hash_rows(
    uf: str,
    municipios: Sequence[Municipio],
    derive: HashFn,
    *,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    on_progress: Optional[ProgressFn] = None,
    started: Optional[float] = None,
) -> List[HashedMunicipio]:
    """Calcula o hash de cada município, sinalizando progresso a cada lote e no fim."""
    start = time.perf_counter() if started is None else started
    total = len(municipios)
    every = max(1, int(progress_every))

    rows: List[HashedMunicipio] = []
    for m in municipios:
        rows.append(HashedMunicipio(m, derive(m)))
        done = len(rows)
        if on_progress is not None and (done % every == 0 or done == total):
            on_progress(uf, done, total, _elapsed_ms(start))
    return rows


def export_region(
    uf: str,
    municipios: Sequence[Municipio],
    *,
    out_dir: Path,
    bin_dir: Path,
    derive: HashFn,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    on_progress: Optional[ProgressFn] = None,
) -> RegionExport:
    """Gera CSV, JSON e BIN de uma UF já ordenada.

    O hash é calculado uma única vez por município; os três arquivos
    são escritos a partir da mesma lista, na mesma ordem.
    """
    start = time.perf_counter()
    paths = output_paths(uf, out_dir, bin_dir)

    rows = hash_rows(
        uf,
        municipios,
        derive,
        progress_every=progress_every,
        on_progress=on_progress,
        started=start,
    )

    write_region_csv(paths["csv"], rows)
    write_region_json(paths["json"], rows)
    write_region_bin(paths["bin"], [r.municipio for r in rows])

    return RegionExport(
        uf=uf,
        count=len(rows),
        csv_path=paths["csv"],
        json_path=paths["json"],
        bin_path=paths["bin"],
        elapsed_ms=_elapsed_ms(start),
    )


def export_regions(
    municipios: Iterable[Municipio],
    *,
    out_dir: Path,
    bin_dir: Path,
    derive: HashFn,
    excluded: Iterable[str] = DEFAULT_EXCLUDED_REGIONS,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    on_progress: Optional[ProgressFn] = None,
    on_region_done: Optional[Callable[[RegionExport], None]] = None,
) -> List[RegionExport]:
    """Exporta todas as UFs em ordem, uma de cada vez.

    Raises:
        OutputWriteError: Falha ao criar diretório ou arquivo (arquivos
            parciais já gravados permanecem no disco).
        HashDerivationError: Falha na derivação do hash (propagada sem captura).
    """
    groups = group_by_region(municipios, excluded)
    out_dir = Path(out_dir)
    bin_dir = Path(bin_dir)

    exports: List[RegionExport] = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        bin_dir.mkdir(parents=True, exist_ok=True)
        for uf, items in groups.items():
            result = export_region(
                uf,
                items,
                out_dir=out_dir,
                bin_dir=bin_dir,
                derive=derive,
                progress_every=progress_every,
                on_progress=on_progress,
            )
            exports.append(result)
            if on_region_done is not None:
                on_region_done(result)
    except OSError as e:
        raise OutputWriteError(
            "Falha ao gravar arquivo de saída",
            details={
                "path": str(getattr(e, "filename", "") or ""),
                "reason": str(e) or e.__class__.__name__,
                "regions_done": [x.uf for x in exports],
            },
            hint="Verifique permissões e espaço em disco do diretório de saída. Arquivos parciais não são removidos.",
        ) from e

    return exports
