# src/blockci/core/pipeline/types.py
"""
Tipos canônicos do blockci.

Este módulo define os dois modelos de dados do sistema, que são
estruturalmente independentes entre si:

    - Modelo de blocos (consumido pelo Compiler):
        Block, PipelineDefinition, BlockType, BlockGroup, FailurePolicy
    - Modelo de grafo (consumido pelo Engine):
        Node, Edge, ExecutionGraph, NodeType

e os estados de execução registrados no Execution Record:
        NodeStatus, RunStatus

Princípios fundamentais:
    - Tipos são imutáveis e construídos a partir de dicts simples
    - Valores de enum são strings estáveis, serializáveis em JSON/YAML
    - Tipos desconhecidos (`block_type`, `group_type`, `node.type`) são
      preservados como string crua; quem decide o que fazer com eles é a
      validação (estrita) ou o consumidor (leniente)

Limites explícitos:
    - Não compila buildspec
    - Não planeja nem executa grafo
    - Não valida referências (ver `validation`)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Modelo de blocos
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Tipos de bloco reconhecidos pelo Block Command Resolver."""
    OS_PACKAGE_MANAGER = "os_package_manager"
    NODE_PACKAGE_MANAGER = "node_package_manager"
    CUSTOM_BUILD_COMMAND = "custom_build_command"
    NODE_TEST_COMMAND = "node_test_command"
    CUSTOM_TEST_COMMAND = "custom_test_command"
    CUSTOM_RUN_COMMAND = "custom_run_command"


PACKAGE_MANAGER_TYPES = frozenset(
    {BlockType.OS_PACKAGE_MANAGER.value, BlockType.NODE_PACKAGE_MANAGER.value}
)


class BlockGroup(str, Enum):
    """
    Grupo de fase de um bloco.

    O grupo decide a fase do buildspec onde os comandos do bloco caem:
        - CUSTOM → pre_build
        - BUILD  → build
        - TEST   → post_build
        - RUN    → post_build (após TEST)
    """
    CUSTOM = "custom"
    BUILD = "build"
    TEST = "test"
    RUN = "run"


class FailurePolicy(str, Enum):
    ABORT = "ABORT"
    CONTINUE = "CONTINUE"


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _text(value: Any) -> str:
    # enums chegam como membros; str() devolveria "Classe.MEMBRO"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = _text(value)
    return value or None


@dataclass(frozen=True)
class Block:
    """
    Um passo do pipeline baseado em blocos.

    `block_type` e `group_type` são mantidos como string crua para que
    tipos desconhecidos sobrevivam ao parsing; os enums `BlockType` e
    `BlockGroup` comparam por igualdade com essas strings.

    Campos específicos por tipo:
        - package_manager + package_list: blocos de gerenciador de pacote
        - custom_command: blocos CUSTOM_BUILD/TEST/RUN_COMMAND
        - test_command (+ package_manager informativo): NODE_TEST_COMMAND
    """
    id: str
    block_type: str
    group_type: str
    on_success: Optional[str] = None
    on_failed: Optional[str] = None
    package_manager: Optional[str] = None
    package_list: Tuple[str, ...] = ()
    custom_command: Tuple[str, ...] = ()
    test_command: Tuple[str, ...] = ()

    @property
    def is_package_manager(self) -> bool:
        return self.block_type in PACKAGE_MANAGER_TYPES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        return cls(
            id=str(data["id"]),
            block_type=_text(data.get("block_type", "")),
            group_type=_text(data.get("group_type", "")),
            on_success=_optional_str(data.get("on_success")),
            on_failed=_optional_str(data.get("on_failed")),
            package_manager=_optional_str(data.get("package_manager")),
            package_list=_str_tuple(data.get("package_list")),
            custom_command=_str_tuple(data.get("custom_command")),
            test_command=_str_tuple(data.get("test_command")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "block_type": self.block_type,
            "group_type": self.group_type,
        }
        for key in ("on_success", "on_failed", "package_manager"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        for key in ("package_list", "custom_command", "test_command"):
            value = getattr(self, key)
            if value:
                out[key] = list(value)
        return out


@dataclass(frozen=True)
class PipelineDefinition:
    """
    Definição de pipeline baseada em blocos (entrada do Compiler).

    `runtime` segue o formato `name` ou `name:version`. `reports` mapeia o
    nome do relatório para `{files, file-format, base-directory,
    discard-paths}`.

    Invariantes:
        - O Compiler nunca muta a definição
        - A ordem declarada de `blocks` é preservada
    """
    version: str = "0.2"
    runtime: Optional[str] = None
    blocks: Tuple[Block, ...] = ()
    artifacts: Tuple[str, ...] = ()
    environment_variables: Dict[str, str] = field(default_factory=dict)
    secrets: Dict[str, str] = field(default_factory=dict)
    cache_paths: Tuple[str, ...] = ()
    reports: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    on_failure: str = FailurePolicy.ABORT.value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineDefinition":
        cache = data.get("cache") or {}
        on_failure = data.get("on_failure") or FailurePolicy.ABORT.value
        return cls(
            version=str(data.get("version") or "0.2"),
            runtime=_optional_str(data.get("runtime")),
            blocks=tuple(Block.from_dict(b) for b in data.get("blocks") or []),
            artifacts=_str_tuple(data.get("artifacts")),
            environment_variables={
                str(k): str(v) for k, v in (data.get("environment_variables") or {}).items()
            },
            secrets={str(k): str(v) for k, v in (data.get("secrets") or {}).items()},
            cache_paths=_str_tuple(cache.get("paths")),
            reports={str(k): dict(v) for k, v in (data.get("reports") or {}).items()},
            on_failure=_text(on_failure),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"version": self.version}
        if self.runtime:
            out["runtime"] = self.runtime
        out["blocks"] = [b.to_dict() for b in self.blocks]
        out["artifacts"] = list(self.artifacts)
        out["environment_variables"] = dict(self.environment_variables)
        out["secrets"] = dict(self.secrets)
        out["cache"] = {"paths": list(self.cache_paths)}
        out["reports"] = {k: dict(v) for k, v in self.reports.items()}
        out["on_failure"] = self.on_failure
        return out


# ---------------------------------------------------------------------------
# Modelo de grafo
# ---------------------------------------------------------------------------

class NodeType(str, Enum):
    """
    Tipos de nó reconhecidos pelo dispatcher do Engine.

    `START` e `PIPELINE_START` são sinônimos (nó de entrada sem efeito).
    """
    START = "start"
    PIPELINE_START = "pipeline_start"
    END = "end"
    BUILD_WEBPACK = "build_webpack"
    BUILD_VITE = "build_vite"
    BUILD_CUSTOM = "build_custom"
    DEPLOY = "deploy"
    TEST_JEST = "test_jest"
    TEST_MOCHA = "test_mocha"
    TEST_VITEST = "test_vitest"


# grafias gravadas pelo editor visual de pipelines
NODE_TYPE_ALIASES: Dict[str, str] = {
    "startNode": NodeType.START.value,
    "pipelineStart": NodeType.PIPELINE_START.value,
    "endNode": NodeType.END.value,
    "buildWebpack": NodeType.BUILD_WEBPACK.value,
    "buildVite": NodeType.BUILD_VITE.value,
    "buildCustom": NodeType.BUILD_CUSTOM.value,
    "deployNode": NodeType.DEPLOY.value,
    "testJest": NodeType.TEST_JEST.value,
    "testMocha": NodeType.TEST_MOCHA.value,
    "testVitest": NodeType.TEST_VITEST.value,
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# sub-documentos cujas chaves também são campos (e não nomes livres)
_NESTED_DATA_KEYS = frozenset({"deployment_strategy", "rollback_config"})


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _node_data(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normaliza as chaves de `node.data` para snake_case.

    `nodeVersion` vira `node_version`, `rollbackConfig.onDeploymentFailure`
    vira `rollback_config.on_deployment_failure`. Valores como
    `environment_variables` não são tocados. Se as duas grafias estiverem
    presentes, a snake_case prevalece.
    """
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _snake(str(key))
        if name in out and name != key:
            continue
        if name in _NESTED_DATA_KEYS and isinstance(value, dict):
            value = _node_data(value)
        out[name] = value
    return out


@dataclass(frozen=True)
class Node:
    id: str
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        node_type = _text(data.get("type", ""))
        return cls(
            id=str(data["id"]),
            type=NODE_TYPE_ALIASES.get(node_type, node_type),
            data=_node_data(dict(data.get("data") or {})),
        )


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        source = str(data["source"])
        target = str(data["target"])
        return cls(source=source, target=target, id=str(data.get("id") or f"{source}->{target}"))


@dataclass(frozen=True)
class ExecutionGraph:
    """
    Grafo de execução (nós tipados + arestas dirigidas).

    Usado exclusivamente pelo Engine; não compartilha espaço de ids nem
    enum de tipos com o modelo de blocos.
    """
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionGraph":
        return cls(
            nodes=tuple(Node.from_dict(n) for n in data.get("nodes") or []),
            edges=tuple(Edge.from_dict(e) for e in data.get("edges") or []),
        )

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]


# ---------------------------------------------------------------------------
# Estados de execução
# ---------------------------------------------------------------------------

class NodeStatus(str, Enum):
    """Estado de um nó no Execution Record (`running` é transitório)."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class RunStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
