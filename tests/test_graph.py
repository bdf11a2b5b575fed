"""Tests for mermaid_svg.ir.graph: AST to networkx conversion."""

from mermaid_svg.ir.graph import GraphIR
from mermaid_svg.parsers.flowchart import FlowchartParser
from mermaid_svg.types import Direction, EdgeType, NodeShape


def build(src: str) -> GraphIR:
    return GraphIR.from_ast(FlowchartParser().parse(src))


def test_nodes_and_edges():
    gir = build("graph LR\nA[Start] --> B{Choice}\nB -->|no| C")
    assert gir.direction == Direction.LR
    assert gir.node_count() == 3
    assert gir.edge_count() == 2
    assert gir.node_data("A").label == "Start"
    assert gir.node_data("B").shape == NodeShape.Diamond
    src, tgt, data = gir.edges()[1]
    assert (src, tgt) == ("B", "C")
    assert data.label == "no"
    assert data.edge_type == EdgeType.Arrow


def test_parallel_edges_kept():
    gir = build("graph TD\nA-->B\nA-->B")
    assert gir.edge_count() == 2


def test_subgraph_membership():
    gir = build("graph TD\nsubgraph G\nA-->B\nend\nB-->C")
    assert gir.subgraph_members == [("G", ["A", "B"])]
    assert gir.node_data("A").subgraph == "G"
    assert gir.node_data("C").subgraph is None
    assert gir.edge_count() == 2


def test_classes_and_styles_carried():
    gir = build("graph TD\nA-->B\nclass A green\nstyle B fill:#f9f")
    assert gir.node_data("A").classes == ["green"]
    assert gir.node_data("B").styles == ["fill:#f9f"]


def test_is_dag():
    assert build("graph TD\nA-->B").is_dag()
    assert not build("graph TD\nA-->B\nB-->A").is_dag()
