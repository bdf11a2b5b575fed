"""Tests for mermaid_svg.parsers.dot."""

import pytest

from mermaid_svg.errors import ParseError
from mermaid_svg.parsers.dot import DotParser
from mermaid_svg.types import Direction, EdgeType, NodeShape


def parse(src: str):
    return DotParser().parse(src)


def test_edge_chain():
    graph = parse("digraph G { a -> b -> c; }")
    assert [n.id for n in graph.nodes] == ["a", "b", "c"]
    assert [(e.from_id, e.to_id) for e in graph.edges] == [("a", "b"), ("b", "c")]
    assert all(e.edge_type == EdgeType.Arrow for e in graph.edges)


def test_attributes():
    graph = parse('digraph { rankdir=LR; a [label="Start", shape=box]; a -> b [label="go", style=dotted] }')
    assert graph.direction == Direction.LR
    a = graph.find_node("a")
    assert a.label == "Start"
    assert a.shape == NodeShape.Rectangle
    assert graph.edges[0].label == "go"
    assert graph.edges[0].edge_type == EdgeType.DottedArrow


def test_node_colors_become_styles():
    graph = parse('digraph { a [fillcolor="#f9f", color=red] }')
    assert graph.nodes[0].styles == ["fill:#f9f", "stroke:red"]


def test_shapes():
    graph = parse("digraph { a [shape=diamond]; b [shape=circle]; c [shape=ellipse] }")
    assert [n.shape for n in graph.nodes] == [NodeShape.Diamond, NodeShape.Circle, NodeShape.Rounded]


def test_subgraph_label():
    graph = parse('digraph { subgraph cluster_0 { label="Group"; x; y } x -> z }')
    assert len(graph.subgraphs) == 1
    assert graph.subgraphs[0].name == "Group"
    assert [n.id for n in graph.subgraphs[0].nodes] == ["x", "y"]
    assert graph.edges[0].to_id == "z"


def test_undirected_graph():
    graph = parse("graph { a -- b }")
    assert graph.edges[0].edge_type == EdgeType.Line


def test_comments_ignored():
    graph = parse("digraph {\n  // a comment\n  a -> b /* inline */\n}")
    assert len(graph.edges) == 1


class TestErrors:
    def test_missing_target(self):
        with pytest.raises(ParseError):
            parse("digraph { a -> }")

    def test_unclosed_body(self):
        with pytest.raises(ParseError):
            parse("digraph { a -> b")

    def test_directed_op_in_undirected_graph(self):
        with pytest.raises(ParseError):
            parse("graph { a -> b }")
