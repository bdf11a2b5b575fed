"""AST data structures for flowchart diagrams.

Both the ``graph``/``flowchart`` grammar and the dot grammar produce a
``Graph``: nodes, edges, subgraphs, plus the styling and interaction
statements (``classDef``, ``class``, ``style``, ``click``).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mermaid_svg.types import Direction, EdgeType, NodeShape


@dataclass
class Node:
    id: str
    label: str
    shape: NodeShape = field(default_factory=NodeShape.default)
    classes: list[str] = field(default_factory=list)
    styles: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, id: str, label: str, shape: NodeShape) -> Node:
        return cls(id=id, label=label, shape=shape)

    @classmethod
    def bare(cls, id: str) -> Node:
        """Create a bare node (id = label, default Rectangle shape)."""
        return cls(id=id, label=id, shape=NodeShape.Rectangle)


@dataclass
class Edge:
    from_id: str
    to_id: str
    edge_type: EdgeType
    label: str | None = None
    styles: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, from_id: str, to_id: str, edge_type: EdgeType) -> Edge:
        return cls(from_id=from_id, to_id=to_id, edge_type=edge_type)


@dataclass
class Subgraph:
    name: str
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    subgraphs: list[Subgraph] = field(default_factory=list)

    @classmethod
    def new(cls, name: str) -> Subgraph:
        return cls(name=name)


@dataclass
class ClassDef:
    name: str
    styles: list[str] = field(default_factory=list)


@dataclass
class Click:
    node_id: str
    callback: str
    tooltip: str | None = None


@dataclass
class Graph:
    direction: Direction = field(default_factory=Direction.default)
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    subgraphs: list[Subgraph] = field(default_factory=list)
    class_defs: dict[str, ClassDef] = field(default_factory=dict)
    clicks: list[Click] = field(default_factory=list)

    @classmethod
    def new(cls) -> Graph:
        return cls()

    def all_nodes(self) -> list[Node]:
        """Top-level and subgraph nodes, first definition first."""
        found: list[Node] = []
        seen: set[str] = set()

        def visit(nodes: list[Node], subgraphs: list[Subgraph]) -> None:
            for node in nodes:
                if node.id not in seen:
                    seen.add(node.id)
                    found.append(node)
            for sg in subgraphs:
                visit(sg.nodes, sg.subgraphs)

        visit(self.nodes, self.subgraphs)
        return found

    def find_node(self, node_id: str) -> Node | None:
        for node in self.all_nodes():
            if node.id == node_id:
                return node
        return None
