# tests/core/config/test_settings.py
"""
Testes das settings tipadas (resolve_settings).

Os testes asseguram que:
- configuração vazia produz exatamente os defaults
- valores numéricos de string (ex.: `runtime_version: 18`) são aceitos
- valores fora do domínio levantam `InvalidSettingError`
- chaves desconhecidas são ignoradas

Limites explícitos:
    - Não valida carregamento de arquivos (ver test_loader.py)
"""

import pytest

try:
    from blockci.core.config.settings import (
        BuildSettings,
        EngineSettings,
        RetrySettings,
        resolve_settings,
    )
    from blockci.core.config.errors import ConfigError, InvalidSettingError
except Exception as e:  # noqa: BLE001
    resolve_settings = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing blockci.core.config.settings. Import error: {_IMPORT_ERR}")


def test_empty_config_gives_defaults():
    _require_imports()
    assert resolve_settings({}) == EngineSettings()
    assert resolve_settings(None) == EngineSettings()
    assert resolve_settings().ordering == "preorder"
    assert resolve_settings().build == BuildSettings(project_prefix="blockci", runtime_version="18", package_manager="npm")
    assert resolve_settings().retry == RetrySettings(
        max_attempts=3, base_delay_ms=1000, max_delay_ms=30000, exponential_backoff=True
    )


def test_sections_override_defaults():
    _require_imports()
    settings = resolve_settings(
        {
            "engine": {"strict_validation": True, "ordering": "topological"},
            "build": {"project_prefix": "acme", "runtime_version": 20, "package_manager": "pnpm"},
            "retry": {"max_attempts": 5, "base_delay_ms": 10, "max_delay_ms": 100},
            "unknown": {"ignored": True},
        }
    )
    assert settings.strict_validation is True
    assert settings.ordering == "topological"
    assert settings.build.project_prefix == "acme"
    assert settings.build.runtime_version == "20"
    assert settings.build.package_manager == "pnpm"
    assert settings.retry.max_attempts == 5
    assert settings.retry.exponential_backoff is True


@pytest.mark.parametrize(
    "config",
    [
        {"engine": "strict"},
        {"engine": {"strict_validation": "yes"}},
        {"engine": {"ordering": "kahn"}},
        {"build": {"project_prefix": ""}},
        {"build": {"package_manager": None}},
        {"retry": {"max_attempts": 0}},
        {"retry": {"max_attempts": True}},
        {"retry": {"base_delay_ms": -1}},
        {"retry": {"base_delay_ms": 5000, "max_delay_ms": 1000}},
        {"retry": {"exponential_backoff": "false"}},
    ],
)
def test_invalid_values_raise(config):
    _require_imports()
    with pytest.raises(InvalidSettingError):
        resolve_settings(config)


def test_invalid_setting_is_a_config_error():
    _require_imports()
    assert issubclass(InvalidSettingError, ConfigError)
