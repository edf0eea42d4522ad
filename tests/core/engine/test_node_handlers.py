# tests/core/engine/test_node_handlers.py
"""
Testes do dispatcher de nós (dispatch_node) isolado do Engine.

Os testes asseguram que:
- start / pipeline_start / end não alteram o contexto
- nós de teste são placeholders que apenas registram warning
- tipos desconhecidos viram warning sem exceção
- o nó de build usa o prefixo de projeto das settings
"""

import pytest

try:
    from blockci.core.config.settings import BuildSettings, EngineSettings
    from blockci.core.engine.handlers import HANDLERS, NodeServices, dispatch_node
    from blockci.core.pipeline.types import Node, NodeType
    from tests.fixtures.triggers import FakeBuildTrigger, FakeDeployTrigger
except Exception as e:  # noqa: BLE001
    dispatch_node = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing engine handlers. Import error: {_IMPORT_ERR}")


def _services(settings=None, build=None, deploy=None):
    return NodeServices(
        build_trigger=build or FakeBuildTrigger(),
        deploy_trigger=deploy or FakeDeployTrigger(),
        settings=settings or EngineSettings(),
    )


def test_every_node_type_has_a_handler():
    _require_imports()
    assert set(HANDLERS) == {t.value for t in NodeType}


@pytest.mark.parametrize("node_type", ["start", "pipeline_start", "end"])
def test_entry_and_exit_nodes_are_noops(dummy_ctx, node_type):
    _require_imports()
    before = dummy_ctx.snapshot()
    dispatch_node(Node(id="n", type=node_type), dummy_ctx, _services())
    assert dummy_ctx.snapshot() == before
    assert dummy_ctx.warnings == {}


@pytest.mark.parametrize("node_type", ["test_jest", "test_mocha", "test_vitest"])
def test_test_nodes_are_placeholders(dummy_ctx, node_type):
    _require_imports()
    dispatch_node(Node(id="t", type=node_type), dummy_ctx, _services())
    assert dummy_ctx.warnings == {"t": [f"Test node not yet implemented: {node_type}"]}
    assert dummy_ctx.build_id is None


def test_unknown_type_is_warning(dummy_ctx):
    _require_imports()
    dispatch_node(Node(id="x", type="lint"), dummy_ctx, _services())
    assert dummy_ctx.warnings == {"x": ["Unknown node type: lint"]}


def test_build_uses_configured_prefix(dummy_ctx):
    _require_imports()
    build = FakeBuildTrigger(build_ids=["b-42"])
    settings = EngineSettings(build=BuildSettings(project_prefix="acme"))

    dispatch_node(Node(id="b", type="build_custom", data={"commands": ["make"]}), dummy_ctx, _services(settings, build))

    assert build.calls[0]["project_name"] == "acme-proj-1-user-1"
    assert build.calls[0]["env_overrides"] == {}
    assert dummy_ctx.build_id == "b-42"
    assert dummy_ctx.artifact_location == "acme-proj-1-user-1-artifacts/b-42"


def test_deploy_reads_build_id_from_context(dummy_ctx):
    _require_imports()
    deploy = FakeDeployTrigger()
    dummy_ctx.build_id = "b-7"

    dispatch_node(Node(id="d", type="deploy"), dummy_ctx, _services(deploy=deploy))

    assert deploy.calls[0]["build_id"] == "b-7"
    assert deploy.calls[0]["config"].environment == "development"
    assert dummy_ctx.deployment_id == "d-1"
