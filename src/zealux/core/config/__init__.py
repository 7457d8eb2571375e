"""
Camada de configuração do Zealux.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar e identificar configurações de execução do engine.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Validação da seção `engine`
    - Geração de hash canônico para rastreabilidade

Limites explícitos:
    - Não carrega nem valida definições de processo
    - Não executa processos
"""

from .engine import DEFAULT_CONFIG, LOG_LEVELS, EngineSettings, resolve_engine_config
from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "EngineSettings",
    "resolve_engine_config",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "deep_merge",
]
