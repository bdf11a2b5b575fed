"""Tests for mermaid_svg.layout: the layered layout used by flowcharts."""

from __future__ import annotations

import networkx as nx

from mermaid_svg.ir.graph import GraphIR
from mermaid_svg.layout import LayeredLayout, LayoutNode, assign_layers, intersect_rect, order_layers, remove_cycles
from mermaid_svg.parsers.flowchart import FlowchartParser

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str]) -> nx.MultiDiGraph:
    """Build a MultiDiGraph from (src, tgt) pairs."""
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    for src, tgt in edges:
        g.add_edge(src, tgt)
    return g


def layout_of(src: str):
    gir = GraphIR.from_ast(FlowchartParser().parse(src))
    sizes = {n: (40.0, 20.0) for n in gir.digraph.nodes}
    return LayeredLayout().layout(gir, sizes)


# ─── Cycle Removal ────────────────────────────────────────────────────────────


class TestCycleRemoval:
    def test_dag_untouched(self):
        dag = remove_cycles(make_graph(("A", "B"), ("B", "C")))
        assert set(dag.edges) == {("A", "B"), ("B", "C")}

    def test_cycle_broken(self):
        dag = remove_cycles(make_graph(("A", "B"), ("B", "C"), ("C", "A")))
        assert nx.is_directed_acyclic_graph(dag)
        assert dag.number_of_edges() == 3

    def test_self_loop_dropped(self):
        dag = remove_cycles(make_graph(("A", "A"), ("A", "B")))
        assert nx.is_directed_acyclic_graph(dag)
        assert list(dag.edges) == [("A", "B")]


# ─── Layers ───────────────────────────────────────────────────────────────────


class TestLayers:
    def test_longest_path(self):
        dag = remove_cycles(make_graph(("A", "B"), ("B", "C"), ("A", "C")))
        assert assign_layers(dag) == {"A": 0, "B": 1, "C": 2}

    def test_ordering_groups_by_layer(self):
        dag = remove_cycles(make_graph(("A", "B"), ("A", "C")))
        ordering = order_layers(dag, assign_layers(dag))
        assert ordering[0] == ["A"]
        assert sorted(ordering[1]) == ["B", "C"]


# ─── Coordinates ──────────────────────────────────────────────────────────────


class TestCoordinates:
    def test_top_down(self):
        result = layout_of("graph TD\nA-->B-->C")
        ys = [result.nodes[n].y for n in "ABC"]
        assert ys == sorted(ys)
        assert len({result.nodes[n].x for n in "ABC"}) == 1

    def test_left_right(self):
        result = layout_of("graph LR\nA-->B-->C")
        xs = [result.nodes[n].x for n in "ABC"]
        assert xs == sorted(xs)

    def test_bottom_top(self):
        result = layout_of("graph BT\nA-->B")
        assert result.nodes["A"].y > result.nodes["B"].y

    def test_edges_clipped_to_boxes(self):
        result = layout_of("graph TD\nA-->B")
        a, b = result.nodes["A"], result.nodes["B"]
        start, end = result.edges[0].points
        assert start[1] == a.y + a.height / 2
        assert end[1] == b.y - b.height / 2

    def test_self_loop_route(self):
        result = layout_of("graph TD\nA-->A")
        assert len(result.edges[0].points) == 4


def test_intersect_rect():
    node = LayoutNode(id="n", layer=0, order=0, x=0, y=0, width=20, height=10)
    assert intersect_rect(node, (100, 0)) == (10, 0)
    assert intersect_rect(node, (0, 100)) == (0, 5)
    assert intersect_rect(node, (0, 0)) == (0, 0)
