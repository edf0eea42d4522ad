# tests/conftest.py
"""
Fixtures compartilhados para testes do blockci.

Fornecem:
- YAMLs de configuração (defaults + override local) como string
- definições de blocos e grafos de execução mínimos
- store em memória já populado e colaboradores falsos de build/deploy
- contexto de execução determinístico

Invariantes:
    - Nenhuma fixture faz I/O de rede
    - Dados retornados são determinísticos e isolados por teste
    - Imports do core são lazy para mensagens de erro mais claras
"""

from datetime import datetime, timedelta, timezone

import pytest


# =====================================================
# Config
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `config/defaults.yaml` do projeto.

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge e hashing
    """
    return """\
engine:
  strict_validation: false
build:
  project_prefix: blockci
  runtime_version: "18"
  package_manager: npm
  artifacts:
    - "**/*"
retry:
  max_attempts: 3
  base_delay_ms: 1000
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """Override local: liga validação estrita e troca o gerenciador de pacotes."""
    return """\
engine:
  strict_validation: true
build:
  package_manager: yarn
  artifacts:
    - dist/**/*
"""


# =====================================================
# Modelo de blocos
# =====================================================

@pytest.fixture
def flow_definition_dict() -> dict:
    """
    Definição de blocos cobrindo os quatro grupos e um fallback.

    - install (custom, os_package_manager apt-get)
    - deps (custom, node_package_manager npm)
    - build (build, custom_build_command, on_failed -> build-fallback)
    - build-fallback (build, custom_build_command)
    - unit (test, node_test_command)
    - serve (run, custom_run_command)
    """
    return {
        "version": "0.2",
        "runtime": "nodejs:20",
        "blocks": [
            {
                "id": "serve",
                "block_type": "custom_run_command",
                "group_type": "run",
                "custom_command": ["npm start"],
            },
            {
                "id": "install",
                "block_type": "os_package_manager",
                "group_type": "custom",
                "package_manager": "apt-get",
                "package_list": ["curl", "git"],
            },
            {
                "id": "deps",
                "block_type": "node_package_manager",
                "group_type": "custom",
                "package_manager": "npm",
                "package_list": [],
            },
            {
                "id": "build",
                "block_type": "custom_build_command",
                "group_type": "build",
                "custom_command": ["npm run build"],
                "on_failed": "build-fallback",
            },
            {
                "id": "build-fallback",
                "block_type": "custom_build_command",
                "group_type": "build",
                "custom_command": ["npm run build:legacy"],
            },
            {
                "id": "unit",
                "block_type": "node_test_command",
                "group_type": "test",
                "package_manager": "npm",
                "test_command": ["npm test"],
            },
        ],
        "artifacts": ["dist/**/*"],
        "environment_variables": {"NODE_ENV": "production"},
        "on_failure": "ABORT",
    }


# =====================================================
# Modelo de grafo / Engine
# =====================================================

@pytest.fixture
def build_deploy_graph() -> dict:
    """Grafo linear start -> build -> deploy -> end, declarado fora de ordem."""
    return {
        "nodes": [
            {"id": "deploy", "type": "deploy", "data": {"environment": "staging"}},
            {"id": "start", "type": "start", "data": {}},
            {"id": "end", "type": "end", "data": {}},
            {"id": "build", "type": "build_vite", "data": {"environment_variables": {"API_URL": "x"}}},
        ],
        "edges": [
            {"id": "e1", "source": "start", "target": "build"},
            {"id": "e2", "source": "build", "target": "deploy"},
            {"id": "e3", "source": "deploy", "target": "end"},
        ],
    }


@pytest.fixture
def memory_store(build_deploy_graph):
    from blockci.persistence.store import InMemoryDocumentStore

    store = InMemoryDocumentStore()
    store.put("pipelines", "pipe-1", {"id": "pipe-1", "name": "web", "data": build_deploy_graph})
    return store


@pytest.fixture
def fake_build_trigger():
    from tests.fixtures.triggers import FakeBuildTrigger

    return FakeBuildTrigger()


@pytest.fixture
def fake_deploy_trigger():
    from tests.fixtures.triggers import FakeDeployTrigger

    return FakeDeployTrigger()


@pytest.fixture
def fixed_clock():
    """Relógio que avança 1s a cada chamada, a partir de 2026-01-16T00:00:00Z."""
    state = {"now": datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)}

    def _clock():
        current = state["now"]
        state["now"] = current + timedelta(seconds=1)
        return current

    return _clock


@pytest.fixture
def dummy_ctx():
    from blockci.core.pipeline.context import ExecutionContext

    return ExecutionContext(
        execution_id="exec-test-001",
        pipeline_id="pipe-1",
        user_id="user-1",
        project_id="proj_1",
    )
