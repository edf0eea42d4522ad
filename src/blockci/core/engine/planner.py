# src/blockci/core/engine/planner.py
"""
Execution Order Resolver.

Produz a ordem linear de visitação dos nós de um `ExecutionGraph`.

Modos de ordenação (`engine.ordering`):

    - `preorder` (default): busca em profundidade, pré-ordem, a partir de
      cada nó de entrada (sem arestas de chegada), na ordem de declaração.
      Na primeira visita o nó entra no resultado; em seguida cada aresta de
      saída é seguida, na ordem de declaração das arestas. Nós já visitados
      são ignorados. Um nó de junção é agendado na primeira chegada, que
      pode ocorrer antes de um ramo irmão ter executado.
    - `topological`: ordenação de Kahn. Um nó só é agendado depois de todos
      os seus predecessores; empates seguem a ordem de declaração dos nós.
      Ciclos e arestas para nós inexistentes são falhas fatais.

Decisões arquiteturais:
    - Em `preorder`, arestas para nós inexistentes são ignoradas e nós sem
      caminho a partir de um nó de entrada (ex.: ciclo fechado) não entram
      na ordem
    - Em ambos os modos, ids duplicados ou vazios são falhas fatais
    - Arestas repetidas entre o mesmo par de nós contam uma única vez

Invariantes:
    - Cada nó aparece no máximo uma vez
    - A mesma entrada sempre produz a mesma ordem
    - `A -> B` produz `[A, B]` em ambos os modos

Limites explícitos:
    - Não executa nós
    - Não valida tipos de nó (ver `core.pipeline.validation`)
"""

from __future__ import annotations

import heapq
from typing import Dict, List, Set, Tuple

from blockci.core.pipeline.types import Edge, ExecutionGraph, Node


ORDER_PREORDER = "preorder"
ORDER_TOPOLOGICAL = "topological"
ORDERINGS = (ORDER_PREORDER, ORDER_TOPOLOGICAL)


class DuplicateNodeIdError(ValueError):
    """Dois nós do grafo compartilham o mesmo `id`."""


class UnknownNodeReferenceError(ValueError):
    """Uma aresta referencia um nó que não existe no grafo."""


class CycleDetectedError(ValueError):
    """
    O grafo contém um ciclo; nenhuma ordem topológica é possível.

    A mensagem lista os nós que não puderam ser agendados.
    """


def _positions(graph: ExecutionGraph) -> Dict[str, int]:
    position: Dict[str, int] = {}
    for idx, node in enumerate(graph.nodes):
        if not isinstance(node.id, str) or not node.id.strip():
            raise ValueError("node.id must be a non-empty string")
        if node.id in position:
            raise DuplicateNodeIdError(f"Duplicate node id: {node.id}")
        position[node.id] = idx
    return position


def prune_graph(graph: ExecutionGraph) -> ExecutionGraph:
    """
    Devolve uma cópia planejável de um grafo com referências quebradas.

    - nós com `id` repetido: só a primeira declaração é mantida
    - arestas cujas pontas não são nós declarados são descartadas

    Usado pelo Engine em modo leniente, depois que `validate_graph` já
    registrou esses problemas como warnings.
    """
    nodes: List[Node] = []
    ids: Set[str] = set()
    for node in graph.nodes:
        if node.id not in ids:
            ids.add(node.id)
            nodes.append(node)
    edges = tuple(e for e in graph.edges if e.source in ids and e.target in ids)
    if len(nodes) == len(graph.nodes) and len(edges) == len(graph.edges):
        return graph
    return ExecutionGraph(nodes=tuple(nodes), edges=edges)


def _preorder(graph: ExecutionGraph, position: Dict[str, int]) -> List[Node]:
    outgoing: Dict[str, List[str]] = {nid: [] for nid in position}
    has_incoming: Set[str] = set()
    for edge in graph.edges:
        has_incoming.add(edge.target)
        if edge.source in outgoing and edge.target in position:
            if edge.target not in outgoing[edge.source]:
                outgoing[edge.source].append(edge.target)

    visited: Set[str] = set()
    order: List[Node] = []

    for root in graph.nodes:
        if root.id in has_incoming or root.id in visited:
            continue
        # pilha explícita; filhos empilhados ao contrário para manter a ordem
        stack = [root.id]
        while stack:
            nid = stack.pop()
            if nid in visited:
                continue
            visited.add(nid)
            order.append(graph.nodes[position[nid]])
            stack.extend(reversed(outgoing[nid]))

    return order


def _check_edges(edges: Tuple[Edge, ...], position: Dict[str, int]) -> None:
    for edge in edges:
        for ref in (edge.source, edge.target):
            if ref not in position:
                raise UnknownNodeReferenceError(
                    f"Edge '{edge.id}' references unknown node '{ref}'"
                )


def _topological(graph: ExecutionGraph, position: Dict[str, int]) -> List[Node]:
    _check_edges(graph.edges, position)

    outgoing: Dict[str, Set[str]] = {nid: set() for nid in position}
    incoming_count: Dict[str, int] = {nid: 0 for nid in position}
    for edge in graph.edges:
        if edge.target in outgoing[edge.source]:
            continue
        outgoing[edge.source].add(edge.target)
        incoming_count[edge.target] += 1

    # heap de posições de declaração
    ready: List[int] = [position[nid] for nid, c in incoming_count.items() if c == 0]
    heapq.heapify(ready)
    order: List[Node] = []

    while ready:
        node = graph.nodes[heapq.heappop(ready)]
        order.append(node)
        for child in outgoing[node.id]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                heapq.heappush(ready, position[child])

    if len(order) != len(graph.nodes):
        scheduled = {n.id for n in order}
        stuck = [n.id for n in graph.nodes if n.id not in scheduled]
        raise CycleDetectedError(
            f"Cycle detected in execution graph involving nodes: {', '.join(stuck)}"
        )

    return order


def plan_execution(graph: ExecutionGraph, ordering: str = ORDER_PREORDER) -> List[Node]:
    """
    Valida a estrutura do grafo e devolve a ordem de execução.

    Args:
        graph (ExecutionGraph): Grafo de nós e arestas.
        ordering (str): `preorder` (default) ou `topological`.

    Returns:
        List[Node]: Nós na ordem de visitação.

    Raises:
        ValueError: Se algum nó tiver `id` vazio ou o modo for desconhecido.
        DuplicateNodeIdError: Se dois nós compartilharem o mesmo `id`.
        UnknownNodeReferenceError: Aresta para nó inexistente (`topological`).
        CycleDetectedError: Se houver ciclo (`topological`).
    """
    if ordering not in ORDERINGS:
        raise ValueError(f"Unknown ordering '{ordering}', expected one of: {', '.join(ORDERINGS)}")

    position = _positions(graph)
    if ordering == ORDER_TOPOLOGICAL:
        return _topological(graph, position)
    return _preorder(graph, position)
