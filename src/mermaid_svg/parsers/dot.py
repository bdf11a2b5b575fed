"""Dot parser: the graphviz subset accepted as an alternate flowchart syntax.

Produces the same ``Graph`` AST as the flowchart parser so both grammars
share one renderer.

    digraph G {
        rankdir=LR;
        a [label="Start", shape=box];
        a -> b -> c [label="next"];
        subgraph cluster_0 { label="Group"; b; c }
    }
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mermaid_svg.errors import ParseError
from mermaid_svg.ir.ast import Edge, Graph, Node, Subgraph
from mermaid_svg.types import Direction, EdgeType, NodeShape

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+|//[^\n]*|\#[^\n]*|/\*.*?\*/)
  | (?P<edgeop>->|--)
  | (?P<punct>[{}\[\]=;,:])
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<id>[A-Za-z_\u0080-\uffff][A-Za-z0-9_\u0080-\uffff]*|-?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?))
    """,
    re.VERBOSE | re.DOTALL,
)

_SHAPES: dict[str, NodeShape] = {
    "box": NodeShape.Rectangle,
    "rect": NodeShape.Rectangle,
    "rectangle": NodeShape.Rectangle,
    "square": NodeShape.Rectangle,
    "ellipse": NodeShape.Rounded,
    "oval": NodeShape.Rounded,
    "mrecord": NodeShape.Rounded,
    "circle": NodeShape.Circle,
    "doublecircle": NodeShape.Circle,
    "diamond": NodeShape.Diamond,
    "cds": NodeShape.Odd,
}

_RANKDIR: dict[str, Direction] = {
    "TB": Direction.TD,
    "LR": Direction.LR,
    "RL": Direction.RL,
    "BT": Direction.BT,
}


@dataclass
class _Token:
    kind: str
    value: str
    pos: int


def _tokenize(src: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(src):
        m = _TOKEN_RE.match(src, pos)
        if m is None:
            raise ParseError.at(src, pos, "dot token")
        kind = m.lastgroup or ""
        if kind != "ws":
            value = m.group(0)
            if kind == "string":
                kind = "id"
                value = value[1:-1].replace('\\"', '"').replace("\\n", "\n")
            tokens.append(_Token(kind, value, pos))
        pos = m.end()
    return tokens


def _node_styles(attrs: dict[str, str]) -> list[str]:
    styles: list[str] = []
    fill = attrs.get("fillcolor")
    if fill:
        styles.append(f"fill:{fill}")
    if attrs.get("color"):
        styles.append(f"stroke:{attrs['color']}")
    return styles


def _edge_type(attrs: dict[str, str], directed: bool) -> EdgeType:
    style = attrs.get("style", "")
    arrowhead = attrs.get("arrowhead", "")
    arrow = directed and arrowhead != "none"
    if style == "dotted" or style == "dashed":
        return EdgeType.DottedArrow if arrow else EdgeType.DottedLine
    if style == "bold":
        return EdgeType.ThickArrow if arrow else EdgeType.ThickLine
    return EdgeType.Arrow if arrow else EdgeType.Line


class _DotCursor:
    """Recursive descent over the token stream."""

    def __init__(self, src: str) -> None:
        self.src = src
        self.tokens = _tokenize(src)
        self.i = 0
        self.graph = Graph.new()
        self.directed = True

    def peek(self, value: str | None = None, kind: str | None = None) -> bool:
        if self.i >= len(self.tokens):
            return False
        tok = self.tokens[self.i]
        if value is not None and tok.value != value:
            return False
        if kind is not None and tok.kind != kind:
            return False
        return True

    def fail(self, expected: str) -> ParseError:
        pos = self.tokens[self.i].pos if self.i < len(self.tokens) else len(self.src)
        return ParseError.at(self.src, pos, expected)

    def take(self, value: str | None = None, kind: str | None = None) -> _Token:
        if not self.peek(value, kind):
            raise self.fail(f"'{value}'" if value else kind or "token")
        tok = self.tokens[self.i]
        self.i += 1
        return tok

    def accept(self, value: str) -> bool:
        if self.peek(value):
            self.i += 1
            return True
        return False

    def parse(self) -> Graph:
        if self.peek(kind="id") and self.tokens[self.i].value.lower() == "strict":
            self.i += 1
        keyword = self.take(kind="id").value.lower()
        if keyword not in ("digraph", "graph"):
            raise ParseError.at(self.src, 0, "'digraph'")
        self.directed = keyword == "digraph"
        if self.peek(kind="id"):
            self.i += 1
        self.take("{")
        self.parse_stmt_list(self.graph.nodes, self.graph.edges, self.graph.subgraphs, None)
        self.take("}")
        if self.i != len(self.tokens):
            raise self.fail("end of input")
        return self.graph

    def parse_stmt_list(
        self,
        nodes: list[Node],
        edges: list[Edge],
        subgraphs: list[Subgraph],
        owner: Subgraph | None,
    ) -> None:
        while not self.peek("}"):
            if self.i >= len(self.tokens):
                raise self.fail("'}'")
            self.parse_stmt(nodes, edges, subgraphs, owner)
            self.accept(";")

    def parse_attr_list(self) -> dict[str, str]:
        attrs: dict[str, str] = {}
        while self.accept("["):
            while not self.accept("]"):
                key = self.take(kind="id").value
                value = "true"
                if self.accept("="):
                    value = self.take(kind="id").value
                attrs[key.lower()] = value
                if not self.accept(","):
                    self.accept(";")
        return attrs

    def parse_node_id(self) -> str:
        node_id = self.take(kind="id").value
        if self.accept(":"):
            self.take(kind="id")
            if self.accept(":"):
                self.take(kind="id")
        return node_id

    def parse_stmt(
        self,
        nodes: list[Node],
        edges: list[Edge],
        subgraphs: list[Subgraph],
        owner: Subgraph | None,
    ) -> None:
        if self.peek("{") or (self.peek(kind="id") and self.tokens[self.i].value.lower() == "subgraph"):
            sg = self.parse_subgraph()
            subgraphs.append(sg)
            members = [n.id for n in sg.nodes]
            self.parse_edge_rhs(members, edges, nodes)
            return
        first = self.take(kind="id")
        lowered = first.value.lower()
        if lowered in ("graph", "node", "edge") and self.peek("["):
            attrs = self.parse_attr_list()
            if lowered == "graph":
                self.apply_graph_attrs(attrs, owner)
            return
        if self.accept("="):
            value = self.take(kind="id").value
            self.apply_graph_attrs({lowered: value}, owner)
            return
        self.i -= 1
        node_id = self.parse_node_id()
        if self.peek(kind="edgeop"):
            self.parse_edge_rhs([node_id], edges, nodes)
            return
        attrs = self.parse_attr_list()
        shape = _SHAPES.get(attrs.get("shape", "").lower(), NodeShape.Rectangle)
        node = Node.new(node_id, attrs.get("label", node_id), shape)
        node.styles = _node_styles(attrs)
        _upsert_node(nodes, node)

    def parse_edge_rhs(self, sources: list[str], edges: list[Edge], nodes: list[Node]) -> None:
        chain: list[list[str]] = [sources]
        ops: list[str] = []
        while self.peek(kind="edgeop"):
            op = self.take(kind="edgeop").value
            if op == "->" and not self.directed:
                raise self.fail("'--'")
            ops.append(op)
            if self.peek("{") or (self.peek(kind="id") and self.tokens[self.i].value.lower() == "subgraph"):
                sg = self.parse_subgraph()
                self.graph.subgraphs.append(sg)
                chain.append([n.id for n in sg.nodes])
            else:
                chain.append([self.parse_node_id()])
        if not ops:
            return
        attrs = self.parse_attr_list()
        etype = _edge_type(attrs, self.directed)
        for step in range(len(ops)):
            for src in chain[step]:
                for tgt in chain[step + 1]:
                    edge = Edge.new(src, tgt, etype)
                    edge.label = attrs.get("label")
                    edges.append(edge)
        for group in chain:
            for node_id in group:
                _upsert_node(nodes, Node.bare(node_id))

    def parse_subgraph(self) -> Subgraph:
        name = ""
        if self.peek(kind="id") and self.tokens[self.i].value.lower() == "subgraph":
            self.i += 1
            if self.peek(kind="id"):
                name = self.take(kind="id").value
        sg = Subgraph.new(name)
        self.take("{")
        self.parse_stmt_list(sg.nodes, sg.edges, sg.subgraphs, sg)
        self.take("}")
        return sg

    def apply_graph_attrs(self, attrs: dict[str, str], owner: Subgraph | None) -> None:
        if owner is not None:
            if "label" in attrs:
                owner.name = attrs["label"]
            return
        rankdir = attrs.get("rankdir")
        if rankdir is not None:
            self.graph.direction = _RANKDIR.get(rankdir.upper(), Direction.TD)


def _upsert_node(nodes: list[Node], node: Node) -> None:
    for i, existing in enumerate(nodes):
        if existing.id == node.id:
            if node.label != node.id or node.shape != NodeShape.Rectangle or node.styles:
                nodes[i] = node
            return
    nodes.append(node)


class DotParser:
    """Dot (graphviz) diagram parser."""

    def parse(self, src: str) -> Graph:
        return _DotCursor(src).parse()
