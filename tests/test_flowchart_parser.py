"""Tests for mermaid_svg.parsers.flowchart."""

import pytest

from mermaid_svg.errors import ParseError
from mermaid_svg.parsers.flowchart import FlowchartParser
from mermaid_svg.types import Direction, EdgeType, NodeShape


def parse(src: str):
    return FlowchartParser().parse(src)


def test_parse_simple_chain():
    graph = parse("graph TD\n    A --> B --> C\n")
    assert graph.direction == Direction.TD
    assert len(graph.nodes) == 3
    assert len(graph.edges) == 2
    assert graph.nodes[0].id == "A"
    assert graph.nodes[0].label == "A"
    assert graph.edges[0].from_id == "A"
    assert graph.edges[0].to_id == "B"


def test_parse_without_trailing_newline():
    graph = parse("graph TB\na-->b")
    assert graph.direction == Direction.TD
    assert [n.id for n in graph.nodes] == ["a", "b"]


def test_parse_node_with_label():
    graph = parse("graph TD\n    A[Start] --> B[End]\n")
    assert graph.nodes[0].label == "Start"
    assert graph.nodes[0].shape == NodeShape.Rectangle
    assert graph.nodes[1].label == "End"


def test_parse_shapes():
    graph = parse("graph TD\n    A[Rect] --> B(Round) --> C{Diamond} --> D((Circle)) --> E>Odd]\n")
    assert [n.shape for n in graph.nodes] == [
        NodeShape.Rectangle,
        NodeShape.Rounded,
        NodeShape.Diamond,
        NodeShape.Circle,
        NodeShape.Odd,
    ]


def test_parse_edge_label():
    graph = parse("graph TD\n    A -->|yes| B\n")
    assert graph.edges[0].label == "yes"


def test_parse_text_edge_label():
    graph = parse("graph LR\n    A-- some text -->B\n")
    assert graph.edges[0].label == "some text"
    assert graph.edges[0].edge_type == EdgeType.Arrow


def test_parse_flowchart_keyword():
    graph = parse("flowchart LR\n    A --> B\n")
    assert graph.direction == Direction.LR


def test_parse_subgraph():
    graph = parse("graph TD\n    subgraph Group\n        A --> B\n    end\n")
    assert len(graph.subgraphs) == 1
    assert graph.subgraphs[0].name == "Group"
    assert len(graph.subgraphs[0].nodes) == 2
    assert len(graph.subgraphs[0].edges) == 1


def test_first_definition_wins():
    graph = parse("graph TD\n    A[Hello] --> B\n    A[World] --> C\n")
    a = next(n for n in graph.nodes if n.id == "A")
    assert a.label == "Hello"


def test_comments_skipped():
    graph = parse("graph TD\n    %% This is a comment\n    A --> B\n")
    assert len(graph.nodes) == 2


def test_semicolon_terminated_statements():
    graph = parse("graph LR;\n    A-->B;\n    B-->C;\n")
    assert len(graph.edges) == 2


def test_edge_types():
    graph = parse("graph TD\n    A --> B\n    C --- D\n    E -.-> F\n    G ==> H\n    I -.- J\n    K === L\n")
    assert [e.edge_type for e in graph.edges] == [
        EdgeType.Arrow,
        EdgeType.Line,
        EdgeType.DottedArrow,
        EdgeType.ThickArrow,
        EdgeType.DottedLine,
        EdgeType.ThickLine,
    ]


def test_quoted_and_multiline_labels():
    graph = parse('graph TD\n    A["Hello World"] --> B["Line1\\nLine2"]\n')
    assert graph.nodes[0].label == "Hello World"
    assert graph.nodes[1].label == "Line1\nLine2"


class TestStyling:
    def test_class_def_and_class(self):
        graph = parse("graph LR\n  classDef green fill:#9f6,stroke:#333\n  class a,b green\n  a-->b\n")
        assert graph.class_defs["green"].styles == ["fill:#9f6", "stroke:#333"]
        assert all(n.classes == ["green"] for n in graph.nodes)

    def test_style_statement(self):
        graph = parse("graph LR\n  a-->b\n  style a fill:#f9f,stroke:#333\n")
        assert graph.find_node("a").styles == ["fill:#f9f", "stroke:#333"]

    def test_link_style(self):
        graph = parse("graph LR\n  a-->b\n  linkStyle 0 stroke:#ff3\n")
        assert graph.edges[0].styles == ["stroke:#ff3"]

    def test_click(self):
        graph = parse('graph LR\n  a-->b\n  click a callback "Tooltip"\n')
        assert len(graph.clicks) == 1
        assert graph.clicks[0].node_id == "a"
        assert graph.clicks[0].callback == "callback"
        assert graph.clicks[0].tooltip == "Tooltip"


class TestErrors:
    def test_dangling_edge(self):
        with pytest.raises(ParseError) as excinfo:
            parse("graph TB\na--")
        assert excinfo.value.context["line"] == 2

    def test_missing_header(self):
        with pytest.raises(ParseError):
            parse("A --> B\n")

    def test_unterminated_subgraph(self):
        with pytest.raises(ParseError):
            parse("graph TD\n    subgraph G\n    A --> B\n")

    def test_unclosed_bracket(self):
        with pytest.raises(ParseError):
            parse("graph TD\n    A[foo --> B\n")

    def test_error_message_points_at_token(self):
        with pytest.raises(ParseError) as excinfo:
            parse("graph TB\na--")
        assert "line 2" in str(excinfo.value)
        assert excinfo.value.context["token"] == "--"
