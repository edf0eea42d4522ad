# src/blockci/core/config/settings.py
"""
Settings tipadas do blockci.

Converte a configuração resolvida (dict) em objetos imutáveis consumidos
pelo Engine, pelo sintetizador de build e pelo Retry Helper.

Seções reconhecidas (todas opcionais; ausência → default):

    engine:
      strict_validation: false
      ordering: preorder          # ou topological
    build:
      project_prefix: blockci
      runtime_version: "18"
      package_manager: npm
    retry:
      max_attempts: 3
      base_delay_ms: 1000
      max_delay_ms: 30000
      exponential_backoff: true

Invariantes:
    - `resolve_settings({})` devolve exatamente os defaults
    - Valores fora do domínio levantam `InvalidSettingError`
    - Chaves desconhecidas são ignoradas
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidSettingError


@dataclass(frozen=True)
class BuildSettings:
    project_prefix: str = "blockci"
    runtime_version: str = "18"
    package_manager: str = "npm"


@dataclass(frozen=True)
class RetrySettings:
    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    exponential_backoff: bool = True


@dataclass(frozen=True)
class EngineSettings:
    strict_validation: bool = False
    ordering: str = "preorder"
    build: BuildSettings = field(default_factory=BuildSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidSettingError(
            f"Seção '{name}' deve ser dict, recebido: {type(value).__name__}"
        )
    return value


def _bool(section: Mapping[str, Any], path: str, key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise InvalidSettingError(f"'{path}.{key}' deve ser bool, recebido: {value!r}")
    return value


def _str(section: Mapping[str, Any], path: str, key: str, default: str) -> str:
    value = section.get(key, default)
    # YAML lê `runtime_version: 18` como int
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidSettingError(
            f"'{path}.{key}' deve ser string não vazia, recebido: {value!r}"
        )
    return value


ORDERINGS = ("preorder", "topological")


def _choice(section: Mapping[str, Any], path: str, key: str, default: str, allowed: Tuple[str, ...]) -> str:
    value = section.get(key, default)
    if value not in allowed:
        raise InvalidSettingError(
            f"'{path}.{key}' deve ser um de {', '.join(allowed)}, recebido: {value!r}"
        )
    return value


def _int(section: Mapping[str, Any], path: str, key: str, default: int, minimum: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidSettingError(
            f"'{path}.{key}' deve ser inteiro >= {minimum}, recebido: {value!r}"
        )
    return value


def resolve_settings(config: Optional[Dict[str, Any]] = None) -> EngineSettings:
    """
    Mapeia a configuração resolvida para `EngineSettings`.

    Args:
        config: Resultado de `load_config` (ou None para defaults puros).

    Raises:
        InvalidSettingError: Tipo ou valor inválido em alguma seção reconhecida.
    """
    config = config or {}

    engine = _section(config, "engine")
    build = _section(config, "build")
    retry = _section(config, "retry")

    retry_settings = RetrySettings(
        max_attempts=_int(retry, "retry", "max_attempts", 3, 1),
        base_delay_ms=_int(retry, "retry", "base_delay_ms", 1000, 0),
        max_delay_ms=_int(retry, "retry", "max_delay_ms", 30000, 0),
        exponential_backoff=_bool(retry, "retry", "exponential_backoff", True),
    )
    if retry_settings.max_delay_ms < retry_settings.base_delay_ms:
        raise InvalidSettingError(
            "'retry.max_delay_ms' não pode ser menor que 'retry.base_delay_ms'"
        )

    return EngineSettings(
        strict_validation=_bool(engine, "engine", "strict_validation", False),
        ordering=_choice(engine, "engine", "ordering", "preorder", ORDERINGS),
        build=BuildSettings(
            project_prefix=_str(build, "build", "project_prefix", "blockci"),
            runtime_version=_str(build, "build", "runtime_version", "18"),
            package_manager=_str(build, "build", "package_manager", "npm"),
        ),
        retry=retry_settings,
    )
