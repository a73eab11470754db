# src/municipios_dataflow/io/fetch.py
"""
Download do CSV de origem.

Uma única tentativa (GET) com timeout; sem retry nem backoff. O corpo da
resposta é gravado como está, em bytes: a decodificação acontece depois,
na leitura do snapshot.

O download é feito em `<dest>.part` e só substitui `dest` quando termina
sem erro; uma transferência interrompida nunca deixa um snapshot truncado.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Union

import requests

from municipios_dataflow.core.exceptions import SnapshotFetchError

DEFAULT_TIMEOUT = 60
CHUNK_SIZE = 8192
PARTIAL_SUFFIX = ".part"

Fetcher = Callable[[str, Path], Path]


def partial_path(dest: Path) -> Path:
    return dest.with_name(dest.name + PARTIAL_SUFFIX)


def download_file(url: str, dest: Union[str, Path], timeout: float = DEFAULT_TIMEOUT) -> Path:
    """Baixa `url` para `dest` (diretório pai criado quando necessário).

    Raises:
        SnapshotFetchError: Erro de rede, timeout ou status HTTP de erro.
    """
    dest = Path(dest)
    tmp = partial_path(dest)
    try:
        with requests.get(url, timeout=timeout, stream=True) as response:
            response.raise_for_status()

            dest.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as f:
                for chunk in response.iter_content(CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        tmp.replace(dest)
    except requests.RequestException as e:
        tmp.unlink(missing_ok=True)
        status = getattr(getattr(e, "response", None), "status_code", None)
        raise SnapshotFetchError(
            "Falha ao baixar o CSV de origem",
            details={"url": url, "dest": str(dest), "status_code": status, "reason": str(e)},
            hint="Verifique a conectividade e a URL configurada, ou execute com --no-fetch.",
        ) from e
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    return dest
