# src/blockci/core/config/__init__.py

"""
Camada de configuração do blockci.

Carrega defaults + overrides locais (YAML/JSON), resolve a configuração
final via deep-merge determinístico, calcula o hash canônico e converte o
resultado em settings tipadas para o Engine, o caminho de build e o
Retry Helper.

Limites explícitos:
    - Não executa pipeline
    - Não compila buildspec
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, load_config_with_hash
from .merge import deep_merge
from .settings import BuildSettings, EngineSettings, RetrySettings, resolve_settings

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "load_config",
    "load_config_with_hash",
    "deep_merge",
    "BuildSettings",
    "EngineSettings",
    "RetrySettings",
    "resolve_settings",
]
