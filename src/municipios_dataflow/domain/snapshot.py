# src/municipios_dataflow/domain/snapshot.py
"""
Snapshots do cadastro e comparação entre eles (Line-Set Differ).

Um snapshot é o dump completo do CSV de origem em um instante. A
comparação entre o snapshot base e o novo é feita por linha inteira,
com igualdade ordinal (sem interpretar campos) e semântica de conjunto:
linhas duplicadas contam uma única vez.

Leitura:
    - UTF-8 (BOM inicial removido)
    - fallback para Windows-1252 quando o UTF-8 falha
    - SnapshotDecodeError quando nenhum dos dois decodifica
    - arquivo vazio → lista vazia
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from municipios_dataflow.core.exceptions import SnapshotDecodeError

PRIMARY_ENCODING = "utf-8-sig"
DEFAULT_FALLBACK_ENCODING = "cp1252"
DEFAULT_REPORT_PREFIX = "municipios_diff_"
REPORT_HEADER = "CHANGE;LINE"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    """Divide em linhas por CRLF, CR ou LF; o terminador final não gera linha vazia."""
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def decode_snapshot(raw: bytes, fallback_encoding: str = DEFAULT_FALLBACK_ENCODING) -> Tuple[str, str]:
    """Decodifica bytes de um snapshot; retorna (texto, encoding usado)."""
    tried = []
    for encoding in (PRIMARY_ENCODING, fallback_encoding):
        tried.append(encoding)
        try:
            return raw.decode(encoding), encoding
        except UnicodeDecodeError:
            continue
    raise SnapshotDecodeError(
        "Snapshot não pôde ser decodificado",
        details={"encodings": tried},
        hint="Verifique o encoding do arquivo de origem; apenas UTF-8 e o fallback configurado são aceitos.",
    )


def read_snapshot_lines(path: Path, fallback_encoding: str = DEFAULT_FALLBACK_ENCODING) -> List[str]:
    """Lê todas as linhas de um snapshot.

    Raises:
        FileNotFoundError: Se o arquivo não existir.
        SnapshotDecodeError: Se o conteúdo não for UTF-8 nem `fallback_encoding`.
    """
    raw = Path(path).read_bytes()
    try:
        text, _ = decode_snapshot(raw, fallback_encoding)
    except SnapshotDecodeError as e:
        raise SnapshotDecodeError(e.message, details={**e.details, "path": str(path)}, hint=e.hint) from None
    return split_lines(text)


def _ordered_difference(left: Iterable[str], right: FrozenSet[str]) -> Tuple[str, ...]:
    seen = set()
    out = []
    for line in left:
        if line in right or line in seen:
            continue
        seen.add(line)
        out.append(line)
    return tuple(out)


@dataclass(frozen=True)
class LineSetDiff:
    """Linhas adicionadas (só no novo) e removidas (só no base).

    A ordem de `added`/`removed` é a da primeira ocorrência em cada
    snapshot; consumidores devem tratá-las como conjuntos.
    """

    added: Tuple[str, ...]
    removed: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed

    @property
    def added_set(self) -> FrozenSet[str]:
        return frozenset(self.added)

    @property
    def removed_set(self) -> FrozenSet[str]:
        return frozenset(self.removed)


def diff_lines(base_lines: Sequence[str], new_lines: Sequence[str]) -> LineSetDiff:
    base_set = frozenset(base_lines)
    new_set = frozenset(new_lines)
    return LineSetDiff(
        added=_ordered_difference(new_lines, base_set),
        removed=_ordered_difference(base_lines, new_set),
    )


def report_path(directory: Path, timestamp: datetime, prefix: str = DEFAULT_REPORT_PREFIX) -> Path:
    return Path(directory) / f"{prefix}{timestamp:%Y%m%d_%H%M%S}.csv"


def write_change_report(
    diff: LineSetDiff,
    directory: Path,
    timestamp: datetime,
    prefix: str = DEFAULT_REPORT_PREFIX,
) -> Optional[Path]:
    """Grava o relatório de mudanças; None (sem arquivo) quando não há diferenças.

    Formato: cabeçalho `CHANGE;LINE`, adições (`+;linha`) antes das remoções
    (`-;linha`), UTF-8 sem BOM.
    """
    if diff.is_empty:
        return None

    path = report_path(directory, timestamp, prefix)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(REPORT_HEADER + "\n")
        for line in diff.added:
            f.write(f"+;{line}\n")
        for line in diff.removed:
            f.write(f"-;{line}\n")
    return path
