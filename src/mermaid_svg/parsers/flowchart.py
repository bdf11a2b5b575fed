"""Flowchart parser: hand-rolled recursive descent.

Parses the ``graph``/``flowchart`` DSL into the AST types from ir.ast. Every
statement must be consumed up to the end of its line; anything left over is a
``ParseError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mermaid_svg.errors import ParseError
from mermaid_svg.ir.ast import ClassDef, Click, Edge, Graph, Node, Subgraph
from mermaid_svg.types import Direction, EdgeType, NodeShape

# ─── Tokenizer ───────────────────────────────────────────────────────────────

_COMMENT_RE = re.compile(r"%%[^\n]*")
_WHITESPACE_RE = re.compile(r"[ \t]+")
_NEWLINE_RE = re.compile(r"\r\n|\n|\r")

# Longer/more specific connectors first
_EDGE_PATTERNS: list[tuple[str, EdgeType]] = [
    ("-.->", EdgeType.DottedArrow),
    ("==>", EdgeType.ThickArrow),
    ("-->", EdgeType.Arrow),
    ("-.-", EdgeType.DottedLine),
    ("===", EdgeType.ThickLine),
    ("---", EdgeType.Line),
]

# A -- text --> B
_TEXT_EDGE_RE = re.compile(r"--[ \t]*([^\n|>-][^\n]*?)[ \t]*(-->|---)")

_NODE_ID_RE = re.compile(r"[A-Za-z0-9_]+")
_HEADER_RE = re.compile(r"(?i:flowchart|graph)(?![A-Za-z0-9_])")
_DIRECTION_RE = re.compile(r"TD|TB|LR|RL|BT")
_BARE_LABEL_RE = re.compile(r"[^\]\)\}\n]+")
_LABEL_TEXT_RE = re.compile(r"[^|\n]+")
_REST_OF_LINE_RE = re.compile(r"[^\n;]+")
_QUOTED_RE = re.compile(r'"([^"\n]*)"')

_KEYWORDS = ("end", "subgraph", "classDef", "class", "style", "linkStyle", "click")


@dataclass
class _Cursor:
    """Stateful parser cursor over the input string."""

    src: str
    pos: int = 0

    # ── Primitive helpers ─────────────────────────────────────────────────────

    def eof(self) -> bool:
        return self.pos >= len(self.src)

    def peek(self, s: str) -> bool:
        return self.src.startswith(s, self.pos)

    def consume(self, s: str) -> bool:
        if self.peek(s):
            self.pos += len(s)
            return True
        return False

    def match_re(self, pattern: re.Pattern[str]) -> str | None:
        m = pattern.match(self.src, self.pos)
        if m:
            self.pos = m.end()
            return m.group(0)
        return None

    def fail(self, expected: str) -> ParseError:
        return ParseError.at(self.src, self.pos, expected)

    def expect(self, s: str) -> None:
        if not self.consume(s):
            raise self.fail(f"'{s}'")

    def skip_ws(self) -> None:
        """Skip spaces/tabs (not newlines)."""
        self.match_re(_WHITESPACE_RE)

    def skip_blank_lines(self) -> None:
        """Skip whitespace, comment-only lines and newlines."""
        while True:
            if self.match_re(_WHITESPACE_RE) or self.match_re(_COMMENT_RE) or self.match_re(_NEWLINE_RE):
                continue
            break

    def end_statement(self) -> None:
        """Consume an optional ';', trailing comment, then a newline or EOF."""
        self.skip_ws()
        self.consume(";")
        self.skip_ws()
        self.match_re(_COMMENT_RE)
        if self.eof() or self.match_re(_NEWLINE_RE):
            return
        raise self.fail("end of statement")

    def at_keyword(self, word: str) -> bool:
        if not self.src.startswith(word, self.pos):
            return False
        after = self.pos + len(word)
        if after >= len(self.src):
            return True
        ch = self.src[after]
        return not (ch.isalnum() or ch == "_")

    # ── Header ────────────────────────────────────────────────────────────────

    def parse_header(self) -> Direction:
        self.skip_blank_lines()
        if not self.match_re(_HEADER_RE):
            raise self.fail("'graph'")
        self.skip_ws()
        direction = self.parse_direction_value()
        self.end_statement()
        return direction

    def parse_direction_value(self) -> Direction:
        d = self.match_re(_DIRECTION_RE)
        if d in ("TD", "TB"):
            return Direction.TD
        if d == "LR":
            return Direction.LR
        if d == "RL":
            return Direction.RL
        if d == "BT":
            return Direction.BT
        return Direction.TD

    # ── Nodes ─────────────────────────────────────────────────────────────────

    def parse_node_label(self, closing: str) -> str:
        self.skip_ws()
        m = _QUOTED_RE.match(self.src, self.pos)
        if m:
            self.pos = m.end()
            label = m.group(1)
        else:
            label = (self.match_re(_BARE_LABEL_RE) or "").strip()
        self.skip_ws()
        self.expect(closing)
        return label.replace("\\n", "\n")

    def parse_node_shape(self) -> tuple[NodeShape, str] | None:
        if self.consume("(("):
            return (NodeShape.Circle, self.parse_node_label("))"))
        if self.consume("("):
            return (NodeShape.Rounded, self.parse_node_label(")"))
        if self.consume("{"):
            return (NodeShape.Diamond, self.parse_node_label("}"))
        if self.consume("["):
            return (NodeShape.Rectangle, self.parse_node_label("]"))
        if self.consume(">"):
            return (NodeShape.Odd, self.parse_node_label("]"))
        return None

    def parse_node_ref(self) -> Node | None:
        self.skip_ws()
        node_id = self.match_re(_NODE_ID_RE)
        if not node_id:
            return None
        shape_result = self.parse_node_shape()
        if shape_result:
            shape, label = shape_result
            return Node.new(node_id, label, shape)
        return Node.bare(node_id)

    def require_node_ref(self) -> Node:
        node = self.parse_node_ref()
        if node is None:
            raise self.fail("node id")
        return node

    # ── Edges ─────────────────────────────────────────────────────────────────

    def parse_edge_connector(self) -> tuple[EdgeType, str | None] | None:
        self.skip_ws()
        m = _TEXT_EDGE_RE.match(self.src, self.pos)
        if m:
            self.pos = m.end()
            etype = EdgeType.Arrow if m.group(2) == "-->" else EdgeType.Line
            return (etype, m.group(1).strip())
        for token, etype in _EDGE_PATTERNS:
            if self.consume(token):
                return (etype, None)
        return None

    def try_parse_edge_label(self) -> str | None:
        self.skip_ws()
        if not self.consume("|"):
            return None
        text = self.match_re(_LABEL_TEXT_RE)
        self.expect("|")
        return (text or "").strip()

    def parse_node_or_edge_stmt(self) -> tuple[list[Node], list[Edge]]:
        source = self.require_node_ref()
        nodes: list[Node] = [source]
        edges: list[Edge] = []
        prev_id = source.id
        while True:
            connector = self.parse_edge_connector()
            if connector is None:
                break
            etype, label = connector
            pipe_label = self.try_parse_edge_label()
            target = self.require_node_ref()
            e = Edge.new(prev_id, target.id, etype)
            e.label = pipe_label if pipe_label is not None else label
            edges.append(e)
            nodes.append(target)
            prev_id = target.id
        self.end_statement()
        return (nodes, edges)

    # ── Styling and interaction ───────────────────────────────────────────────

    def parse_styles(self) -> list[str]:
        self.skip_ws()
        text = self.match_re(_REST_OF_LINE_RE)
        if not text or not text.strip():
            raise self.fail("style list")
        return [s.strip() for s in text.split(",") if s.strip()]

    def parse_id_list(self) -> list[str]:
        ids: list[str] = []
        while True:
            self.skip_ws()
            node_id = self.match_re(_NODE_ID_RE)
            if node_id is None:
                raise self.fail("node id")
            ids.append(node_id)
            self.skip_ws()
            if not self.consume(","):
                return ids

    def parse_class_def(self, graph: Graph) -> None:
        self.pos += len("classDef")
        self.skip_ws()
        name = self.match_re(_NODE_ID_RE)
        if name is None:
            raise self.fail("class name")
        graph.class_defs[name] = ClassDef(name=name, styles=self.parse_styles())
        self.end_statement()

    def parse_class_stmt(self, graph: Graph) -> None:
        self.pos += len("class")
        ids = self.parse_id_list()
        self.skip_ws()
        name = self.match_re(_NODE_ID_RE)
        if name is None:
            raise self.fail("class name")
        for node_id in ids:
            _node_for_update(graph, node_id).classes.append(name)
        self.end_statement()

    def parse_style_stmt(self, graph: Graph) -> None:
        self.pos += len("style")
        self.skip_ws()
        node_id = self.match_re(_NODE_ID_RE)
        if node_id is None:
            raise self.fail("node id")
        _node_for_update(graph, node_id).styles.extend(self.parse_styles())
        self.end_statement()

    def parse_link_style(self, edges: list[Edge]) -> None:
        self.pos += len("linkStyle")
        self.skip_ws()
        index = self.match_re(re.compile(r"\d+"))
        if index is None:
            raise self.fail("edge index")
        styles = self.parse_styles()
        if int(index) >= len(edges):
            raise ParseError.at(self.src, self.pos, f"edge index below {len(edges)}")
        edges[int(index)].styles.extend(styles)
        self.end_statement()

    def parse_click(self, graph: Graph) -> None:
        self.pos += len("click")
        self.skip_ws()
        node_id = self.match_re(_NODE_ID_RE)
        if node_id is None:
            raise self.fail("node id")
        self.skip_ws()
        callback = self.match_re(re.compile(r"[A-Za-z_$][\w$.]*"))
        if callback is None:
            raise self.fail("callback name")
        self.skip_ws()
        tooltip = None
        m = _QUOTED_RE.match(self.src, self.pos)
        if m:
            self.pos = m.end()
            tooltip = m.group(1)
        graph.clicks.append(Click(node_id=node_id, callback=callback, tooltip=tooltip))
        self.end_statement()

    # ── Statements ────────────────────────────────────────────────────────────

    def parse_subgraph_block(self, graph: Graph) -> Subgraph:
        self.pos += len("subgraph")
        self.skip_ws()
        m = _QUOTED_RE.match(self.src, self.pos)
        if m:
            self.pos = m.end()
            name = m.group(1)
        else:
            name = (self.match_re(re.compile(r"[^\n;%]+")) or "").strip()
        if not name:
            raise self.fail("subgraph title")
        self.end_statement()
        sg = Subgraph.new(name)
        while True:
            self.skip_blank_lines()
            if self.eof():
                raise self.fail("'end'")
            if self.at_keyword("end"):
                self.pos += len("end")
                self.end_statement()
                return sg
            self.parse_statement_into(graph, sg.nodes, sg.edges, sg.subgraphs)

    def parse_statement_into(
        self,
        graph: Graph,
        nodes: list[Node],
        edges: list[Edge],
        subgraphs: list[Subgraph],
    ) -> None:
        if self.at_keyword("subgraph"):
            subgraphs.append(self.parse_subgraph_block(graph))
        elif self.at_keyword("classDef"):
            self.parse_class_def(graph)
        elif self.at_keyword("class"):
            self.parse_class_stmt(graph)
        elif self.at_keyword("style"):
            self.parse_style_stmt(graph)
        elif self.at_keyword("linkStyle"):
            self.parse_link_style(graph.edges)
        elif self.at_keyword("click"):
            self.parse_click(graph)
        elif self.at_keyword("end"):
            raise self.fail("statement")
        else:
            stmt_nodes, stmt_edges = self.parse_node_or_edge_stmt()
            for n in stmt_nodes:
                _upsert_node(nodes, n)
            edges.extend(stmt_edges)

    def parse_graph(self) -> Graph:
        graph = Graph.new()
        graph.direction = self.parse_header()
        while True:
            self.skip_blank_lines()
            if self.eof():
                break
            self.parse_statement_into(graph, graph.nodes, graph.edges, graph.subgraphs)
        return graph


def _upsert_node(nodes: list[Node], node: Node) -> None:
    """First shaped definition wins; a bare reference never erases a label."""
    for i, existing in enumerate(nodes):
        if existing.id == node.id:
            if existing.label == existing.id and node.label != node.id:
                node.classes = existing.classes + node.classes
                node.styles = existing.styles + node.styles
                nodes[i] = node
            return
    nodes.append(node)


def _node_for_update(graph: Graph, node_id: str) -> Node:
    node = graph.find_node(node_id)
    if node is None:
        node = Node.bare(node_id)
        graph.nodes.append(node)
    return node


class FlowchartParser:
    """Flowchart/graph diagram parser."""

    def parse(self, src: str) -> Graph:
        cursor = _Cursor(src=src)
        return cursor.parse_graph()
