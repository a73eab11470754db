# src/municipios_dataflow/domain/record.py
"""
Modelo canônico de município.

Um registro do cadastro possui cinco campos posicionais, na ordem do CSV
de origem:

    TOM;IBGE;NomeTOM;NomeIBGE;UF

Regras de parsing (v1):
    - Linhas vazias ou só com espaços são descartadas
    - Linhas com menos de 5 campos após o split são descartadas (sem erro)
    - Colunas extras são ignoradas
    - Cada campo é sanitizado: trim + remoção de caracteres de controle
    - UF é normalizada para maiúsculas

Cabeçalho: a linha 0 é pulada quando contém (case-insensitive) algum
dos marcadores de nome das duas primeiras colunas (TOM, IBGE).
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

FIELD_COUNT = 5
DEFAULT_DELIMITER = ";"
DEFAULT_HEADER_MARKERS: Tuple[str, ...] = ("TOM", "IBGE")


def sanitize(value: Optional[str]) -> str:
    """Remove caracteres de controle e espaços nas bordas; None vira ""."""
    if value is None:
        return ""
    cleaned = "".join(ch for ch in value if unicodedata.category(ch) != "Cc")
    return cleaned.strip()


@dataclass(frozen=True)
class Municipio:
    """Município do cadastro, imutável após a construção."""

    tom: str
    ibge: str
    nome_tom: str
    nome_ibge: str
    uf: str

    @classmethod
    def from_fields(cls, fields: Sequence[Optional[str]]) -> "Municipio":
        if len(fields) < FIELD_COUNT:
            raise ValueError(f"expected at least {FIELD_COUNT} fields, got {len(fields)}")
        return cls(
            tom=sanitize(fields[0]),
            ibge=sanitize(fields[1]),
            nome_tom=sanitize(fields[2]),
            nome_ibge=sanitize(fields[3]),
            uf=sanitize(fields[4]).upper(),
        )

    @property
    def nome_preferido(self) -> str:
        """Nome IBGE quando presente; senão o nome TOM. Usado só para ordenação e busca."""
        return self.nome_ibge if self.nome_ibge else self.nome_tom

    def fields(self) -> Tuple[str, str, str, str, str]:
        return (self.tom, self.ibge, self.nome_tom, self.nome_ibge, self.uf)

    def concatenated(self, separator: str = DEFAULT_DELIMITER) -> str:
        """Material de senha para a derivação de hash.

        O separador padrão é o próprio delimitador do CSV, que nunca
        aparece em um campo obtido pelo split da linha.
        """
        return separator.join(self.fields())


def is_header(
    line: str,
    markers: Iterable[str] = DEFAULT_HEADER_MARKERS,
    *,
    delimiter: str = DEFAULT_DELIMITER,
) -> bool:
    """Verdadeiro quando as primeiras colunas da linha são os nomes esperados.

    Cada marcador é procurado (sem diferenciar maiúsculas) apenas na coluna
    de mesma posição, nunca na linha inteira: um nome de município como
    "São Tomé" não transforma uma linha de dados em cabeçalho.
    """
    wanted = [m.upper() for m in markers if m]
    if not wanted:
        return False

    columns = [c.strip().upper() for c in (line or "").split(delimiter)]
    if len(columns) < len(wanted):
        return False
    return all(m in c for m, c in zip(wanted, columns))


def parse_line(
    line: Optional[str],
    *,
    delimiter: str = DEFAULT_DELIMITER,
    min_fields: int = FIELD_COUNT,
) -> Optional[Municipio]:
    """Converte uma linha em Municipio; None quando a linha é vazia ou malformada."""
    text = (line or "").strip()
    if not text:
        return None

    parts = text.split(delimiter)
    if len(parts) < max(min_fields, FIELD_COUNT):
        return None

    return Municipio.from_fields(parts)


def parse_lines(
    lines: Sequence[str],
    *,
    delimiter: str = DEFAULT_DELIMITER,
    min_fields: int = FIELD_COUNT,
    header_markers: Iterable[str] = DEFAULT_HEADER_MARKERS,
) -> List[Municipio]:
    """Parseia todas as linhas de um snapshot preservando a ordem de origem."""
    if not lines:
        return []

    start = 1 if is_header(lines[0], header_markers, delimiter=delimiter) else 0
    municipios: List[Municipio] = []
    for line in lines[start:]:
        m = parse_line(line, delimiter=delimiter, min_fields=min_fields)
        if m is not None:
            municipios.append(m)
    return municipios
