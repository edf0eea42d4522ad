# src/blockci/core/engine/__init__.py
"""
Engine do blockci.

Componentes principais:
    - planner  → ordem de visitação do grafo de nós (preorder ou topológica)
    - handlers → dispatch por tipo de nó (build, deploy, test, start/end)
    - engine   → `PipelineExecutor`: execução sequencial com fail-fast

Invariantes:
    - Um nó só executa depois de ser alcançado a partir de um nó de entrada
    - Cada nó executa no máximo uma vez por run
    - A primeira falha interrompe a run; nós restantes ficam `pending`
"""

from .engine import PipelineExecutor, RunResult
from .handlers import NodeServices, dispatch_node
from .planner import (
    CycleDetectedError,
    DuplicateNodeIdError,
    ORDER_PREORDER,
    ORDER_TOPOLOGICAL,
    UnknownNodeReferenceError,
    prune_graph,
    plan_execution,
)

__all__ = [
    "PipelineExecutor",
    "RunResult",
    "NodeServices",
    "dispatch_node",
    "CycleDetectedError",
    "DuplicateNodeIdError",
    "ORDER_PREORDER",
    "ORDER_TOPOLOGICAL",
    "UnknownNodeReferenceError",
    "prune_graph",
    "plan_execution",
]
