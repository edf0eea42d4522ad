# tests/core/engine/test_planner_preorder.py
"""
Testes do modo default (`preorder`) do Execution Order Resolver.

Os testes asseguram que:
- a visitação parte dos nós sem arestas de chegada, na ordem de declaração
- cada ramo é percorrido até o fim antes do ramo irmão (pré-ordem)
- arestas de saída são seguidas na ordem de declaração das arestas
- um nó de junção entra na primeira chegada
- nós já visitados e arestas para nós inexistentes são ignorados

Decisões arquiteturais:
    - `preorder` é o default de `plan_execution` e de `engine.ordering`
    - Ciclos não levantam exceção neste modo; o nó repetido é ignorado

Limites explícitos:
    - Modo `topological` coberto em test_planner_toposort.py
"""

import pytest

try:
    from blockci.core.engine.planner import (
        DuplicateNodeIdError,
        ORDER_PREORDER,
        plan_execution,
        prune_graph,
    )
    from blockci.core.pipeline.types import Edge, ExecutionGraph, Node
except Exception as e:  # noqa: BLE001
    plan_execution = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing planner (preorder). Import error: {_IMPORT_ERR}")


def _graph(node_ids, edges):
    return ExecutionGraph(
        nodes=tuple(Node(id=nid, type="start") for nid in node_ids),
        edges=tuple(Edge(source=s, target=t) for s, t in edges),
    )


def _ids(graph, **kw):
    return [n.id for n in plan_execution(graph, **kw)]


def test_two_node_chain():
    _require_imports()
    assert _ids(_graph(["a", "b"], [("a", "b")])) == ["a", "b"]


def test_linear_chain_declared_out_of_order():
    _require_imports()
    assert _ids(_graph(["c", "a", "b"], [("a", "b"), ("b", "c")])) == ["a", "b", "c"]


def test_branch_is_walked_to_the_end_before_sibling():
    """
    Verifica que `s->a, s->b, a->c` produz `[s, a, c, b]`.

    Invariantes:
        - O ramo de `a` termina antes de `b` ser visitado
    """
    _require_imports()
    graph = _graph(["s", "a", "b", "c"], [("s", "a"), ("s", "b"), ("a", "c")])
    assert _ids(graph) == ["s", "a", "c", "b"]


def test_join_is_scheduled_on_first_arrival():
    _require_imports()
    graph = _graph(["start", "left", "right", "end"], [
        ("start", "left"),
        ("start", "right"),
        ("left", "end"),
        ("right", "end"),
    ])
    assert _ids(graph) == ["start", "left", "end", "right"]


def test_outgoing_edges_follow_edge_declaration_order():
    _require_imports()
    graph = _graph(["s", "x", "y"], [("s", "y"), ("s", "x")])
    assert _ids(graph) == ["s", "y", "x"]


def test_entry_nodes_are_visited_in_declaration_order():
    _require_imports()
    graph = _graph(["a", "b", "c", "d"], [("b", "d"), ("a", "c")])
    assert _ids(graph) == ["a", "c", "b", "d"]


def test_cycle_reachable_from_entry_is_cut_at_visited_node():
    _require_imports()
    graph = _graph(["s", "a", "b"], [("s", "a"), ("a", "b"), ("b", "a")])
    assert _ids(graph) == ["s", "a", "b"]


def test_closed_cycle_without_entry_is_not_scheduled():
    _require_imports()
    assert _ids(_graph(["a", "b"], [("a", "b"), ("b", "a")])) == []


def test_edge_to_unknown_node_is_ignored():
    _require_imports()
    graph = _graph(["a", "b"], [("a", "ghost"), ("a", "b")])
    assert _ids(graph) == ["a", "b"]


def test_default_ordering_is_preorder(build_deploy_graph):
    _require_imports()
    graph = ExecutionGraph.from_dict(build_deploy_graph)
    assert _ids(graph) == _ids(graph, ordering=ORDER_PREORDER) == ["start", "build", "deploy", "end"]


def test_unknown_ordering_raises():
    _require_imports()
    with pytest.raises(ValueError, match="Unknown ordering"):
        plan_execution(_graph(["a"], []), "random")


def test_duplicate_node_id_raises_in_preorder():
    _require_imports()
    with pytest.raises(DuplicateNodeIdError):
        plan_execution(_graph(["a", "a"], []))


def test_prune_graph_drops_broken_references():
    """
    Verifica a cópia planejável usada pelo Engine em modo leniente.

    Invariantes:
        - Primeira declaração de um id repetido é mantida
        - Arestas com ponta inexistente são descartadas
        - Grafo sem problemas é devolvido sem cópia
    """
    _require_imports()
    graph = ExecutionGraph(
        nodes=(Node(id="a", type="start"), Node(id="a", type="end"), Node(id="b", type="end")),
        edges=(Edge(source="a", target="b"), Edge(source="ghost", target="b")),
    )
    pruned = prune_graph(graph)

    assert [(n.id, n.type) for n in pruned.nodes] == [("a", "start"), ("b", "end")]
    assert [(e.source, e.target) for e in pruned.edges] == [("a", "b")]
    assert _ids(pruned) == ["a", "b"]

    clean = _graph(["a", "b"], [("a", "b")])
    assert prune_graph(clean) is clean
