# src/municipios_dataflow/core/config/errors.py
"""
Erros de configuração, levantados antes de qualquer Step rodar.

A CLI captura `ConfigError` e encerra com código 2, separando "config
inválida" (nada foi baixado nem escrito) de "run falhou" (código 1).
"""


class ConfigError(Exception):
    """Base de todos os erros de configuração."""


class DefaultsNotFoundError(ConfigError):
    """`defaults.yaml` empacotado ausente; a instalação está quebrada."""


class UnsupportedConfigFormatError(ConfigError):
    """Arquivo de `--config` com extensão diferente de .yaml, .yml ou .json."""


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"steps": {"export.regions": {"progress_every": 50}}}
        - override: {"steps": {"export.regions": {"progress_every": "50"}}}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
        - Não realiza coerção de tipos
    """
