# src/blockci/core/pipeline/__init__.py
"""
# Pipeline Core — blockci

Contratos e estruturas fundamentais compartilhados pelo Compiler e pelo
Engine.

## Componentes

- **types**
  - `Block`, `PipelineDefinition`: modelo de blocos (entrada do Compiler)
  - `Node`, `Edge`, `ExecutionGraph`: modelo de grafo (entrada do Engine)
  - `NodeStatus`, `RunStatus`: estados registrados no Execution Record
- **context**
  - `ExecutionContext`: estado acumulado de uma run (build id, logs, warnings)
- **registry**
  - `BlockRegistry`: unicidade de `block.id`
- **validation**
  - `validate_definition` / `validate_graph` e `ValidationError`

## Invariantes

- Os dois modelos não compartilham ids nem enums de tipo
- Estado compartilhado entre nós é sempre explícito (`ExecutionContext`)
"""

from .context import ExecutionContext
from .registry import BlockRegistry, DuplicateBlockIdError, index_blocks
from .types import (
    Block,
    BlockGroup,
    BlockType,
    Edge,
    ExecutionGraph,
    FailurePolicy,
    Node,
    NodeStatus,
    NodeType,
    PipelineDefinition,
    RunStatus,
)
from .validation import (
    ValidationError,
    ensure_valid_definition,
    ensure_valid_graph,
    validate_definition,
    validate_graph,
)

__all__ = [
    "ExecutionContext",
    "BlockRegistry",
    "DuplicateBlockIdError",
    "index_blocks",
    "Block",
    "BlockGroup",
    "BlockType",
    "Edge",
    "ExecutionGraph",
    "FailurePolicy",
    "Node",
    "NodeStatus",
    "NodeType",
    "PipelineDefinition",
    "RunStatus",
    "ValidationError",
    "ensure_valid_definition",
    "ensure_valid_graph",
    "validate_definition",
    "validate_graph",
]
