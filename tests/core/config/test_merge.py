# tests/core/config/test_merge.py
"""
Testes do deep-merge de configuração (deep_merge).

Os testes asseguram que:
- dicts são mesclados recursivamente
- listas são substituídas integralmente
- escalares são sobrescritos
- conflitos de tipo levantam `ConfigTypeConflictError`
- nenhum input é mutado

Decisões arquiteturais:
    - int e float são tratados como o mesmo tipo numérico; bool não
    - `None` em qualquer lado é tratado como ausência de tipo (override vence)
"""

import pytest

try:
    from blockci.core.config.merge import deep_merge
    from blockci.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing merge/errors modules. Implement:\n"
            "- src/blockci/core/config/merge.py (deep_merge)\n"
            "- src/blockci/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    _require_imports()
    base = {"a": 1, "b": 2}
    override = {"b": 99}
    out = deep_merge(base, override)
    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    _require_imports()
    base = {"build": {"project_prefix": "blockci", "package_manager": "npm"}}
    override = {"build": {"package_manager": "pnpm"}}
    out = deep_merge(base, override)
    assert out == {"build": {"project_prefix": "blockci", "package_manager": "pnpm"}}


def test_merge_list_override_total():
    _require_imports()
    base = {"build": {"artifacts": ["**/*", "coverage/**"]}}
    override = {"build": {"artifacts": ["dist/**/*"]}}
    out = deep_merge(base, override)
    assert out == {"build": {"artifacts": ["dist/**/*"]}}


def test_merge_int_and_float_are_compatible():
    _require_imports()
    out = deep_merge({"retry": {"base_delay_ms": 1000.0}}, {"retry": {"base_delay_ms": 500}})
    assert out["retry"]["base_delay_ms"] == 500


def test_merge_none_never_conflicts():
    _require_imports()
    assert deep_merge({"a": None}, {"a": {"x": 1}}) == {"a": {"x": 1}}
    assert deep_merge({"a": {"x": 1}}, {"a": None}) == {"a": None}


def test_merge_does_not_share_nested_objects():
    _require_imports()
    override = {"build": {"artifacts": ["dist/**/*"]}}
    out = deep_merge({}, override)
    out["build"]["artifacts"].append("mutated")
    assert override == {"build": {"artifacts": ["dist/**/*"]}}


@pytest.mark.parametrize(
    "base, override",
    [
        ({"retry": {"max_attempts": 3}}, {"retry": "off"}),
        ({"engine": {"strict_validation": False}}, {"engine": {"strict_validation": 1}}),
        ({"build": {"artifacts": ["**/*"]}}, {"build": {"artifacts": "dist"}}),
    ],
)
def test_merge_type_conflict_raises(base, override):
    """
    Verifica que mudanças de tipo entre base e override são erros explícitos.

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
        - bool e int não são compatíveis
    """
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_merge_requires_dict_roots():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["a"])
