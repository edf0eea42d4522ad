# src/blockci/core/pipeline/validation.py
"""
Passo de validação explícito para definições de blocos e grafos de execução.

O Compiler e o dispatcher do Engine são lenientes: referências não
resolvidas produzem zero comandos e tipos desconhecidos viram no-op. Este
módulo torna essas lacunas visíveis antes da compilação ou da execução,
enumerando todos os problemas de uma vez.

Cada problema é um dict serializável:

    {"code": "...", "message": "...", <campos de localização>}

Códigos emitidos:
    - duplicate_block_id, invalid_block_id, unknown_block_type, unknown_group_type,
      unresolved_reference (definições)
    - duplicate_node_id, unknown_node_type, unknown_edge_endpoint (grafos)

Decisões arquiteturais:
    - `validate_*` apenas coletam; `ensure_valid_*` levantam `ValidationError`
    - Ciclos não são verificados aqui (responsabilidade do planner)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Set, Tuple

from blockci.core.errors import validation_error
from blockci.core.exceptions import BlockCIException

from .registry import BlockRegistry, DuplicateBlockIdError
from .types import BlockGroup, BlockType, ExecutionGraph, NodeType, PipelineDefinition


_BLOCK_TYPES = frozenset(t.value for t in BlockType)
_BLOCK_GROUPS = frozenset(g.value for g in BlockGroup)
_NODE_TYPES = frozenset(t.value for t in NodeType)


@dataclass(frozen=True)
class ValidationError(BlockCIException):
    """Definição ou grafo com um ou mais problemas estruturais."""

    issues: Tuple[Dict[str, Any], ...] = ()


def validate_definition(definition: PipelineDefinition) -> List[Dict[str, Any]]:
    issues: List[Dict[str, Any]] = []
    registry = BlockRegistry()

    for block in definition.blocks:
        try:
            registry.add(block)
        except DuplicateBlockIdError as exc:
            issues.append({
                "code": "duplicate_block_id",
                "message": str(exc),
                "block_id": block.id,
            })
        except ValueError as exc:
            issues.append({
                "code": "invalid_block_id",
                "message": str(exc),
                "block_id": block.id,
            })

        if block.block_type not in _BLOCK_TYPES:
            issues.append({
                "code": "unknown_block_type",
                "message": f"Block {block.id} has unknown type '{block.block_type}'",
                "block_id": block.id,
                "value": block.block_type,
            })
        if block.group_type not in _BLOCK_GROUPS:
            issues.append({
                "code": "unknown_group_type",
                "message": f"Block {block.id} has unknown group '{block.group_type}'",
                "block_id": block.id,
                "value": block.group_type,
            })

    for block in definition.blocks:
        for field_name in ("on_success", "on_failed"):
            ref = getattr(block, field_name)
            if ref is not None and ref not in registry:
                issues.append({
                    "code": "unresolved_reference",
                    "message": f"Block {block.id} {field_name} references unknown block '{ref}'",
                    "block_id": block.id,
                    "field": field_name,
                    "value": ref,
                })

    return issues


def validate_graph(graph: ExecutionGraph) -> List[Dict[str, Any]]:
    issues: List[Dict[str, Any]] = []
    seen: Set[str] = set()

    for node in graph.nodes:
        if node.id in seen:
            issues.append({
                "code": "duplicate_node_id",
                "message": f"Duplicate node id: {node.id}",
                "node_id": node.id,
            })
        seen.add(node.id)

        if node.type not in _NODE_TYPES:
            issues.append({
                "code": "unknown_node_type",
                "message": f"Node {node.id} has unknown type '{node.type}'",
                "node_id": node.id,
                "value": node.type,
            })

    for edge in graph.edges:
        for end in ("source", "target"):
            ref = getattr(edge, end)
            if ref not in seen:
                issues.append({
                    "code": "unknown_edge_endpoint",
                    "message": f"Edge {edge.id} {end} references unknown node '{ref}'",
                    "edge_id": edge.id,
                    "field": end,
                    "value": ref,
                })

    return issues


def _raise_if_any(issues: List[Dict[str, Any]], subject: str) -> None:
    if not issues:
        return
    payload = validation_error(issues=issues, subject=subject)
    raise ValidationError(
        message=payload.message,
        details=payload.details,
        hint=payload.hint,
        issues=tuple(issues),
    )


def ensure_valid_definition(definition: PipelineDefinition) -> None:
    """
    Levanta `ValidationError` listando todos os problemas da definição.

    Raises:
        ValidationError: Se `validate_definition` encontrar qualquer problema.
    """
    _raise_if_any(validate_definition(definition), "Pipeline definition")


def ensure_valid_graph(graph: ExecutionGraph) -> None:
    """
    Levanta `ValidationError` listando todos os problemas do grafo.

    Raises:
        ValidationError: Se `validate_graph` encontrar qualquer problema.
    """
    _raise_if_any(validate_graph(graph), "Execution graph")
