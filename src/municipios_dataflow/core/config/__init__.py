# src/municipios_dataflow/core/config/__init__.py
"""
Camada de configuração do Municípios DataFlow.

Responsabilidades do pacote:
    - Carregamento dos defaults empacotados (`defaults.yaml`) e de overrides locais
    - Resolução de configuração final via deep-merge determinístico
    - Validação estrutural básica da configuração
    - Geração de hash canônico para rastreabilidade (Manifest)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - A mesma entrada sempre produz a mesma configuração final
    - Conflitos estruturais são tratados como erro

Limites explícitos:
    - Não valida semântica de domínio
    - Não executa pipeline
"""

from .loader import DEFAULTS_PATH, load_config, step_config
from .hashing import compute_config_hash
from .merge import deep_merge

__all__ = ["DEFAULTS_PATH", "load_config", "step_config", "compute_config_hash", "deep_merge"]
