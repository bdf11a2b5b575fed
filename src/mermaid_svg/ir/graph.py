"""Graph IR: converts a flowchart AST into a networkx DiGraph for layout.

Subgraphs are flattened into the main node/edge set; membership is kept so
the renderer can draw cluster boxes around their members.
"""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from mermaid_svg.ir import ast
from mermaid_svg.types import Direction, EdgeType, NodeShape


@dataclass
class NodeData:
    id: str
    label: str
    shape: NodeShape
    classes: list[str]
    styles: list[str]
    subgraph: str | None = None


@dataclass
class EdgeData:
    edge_type: EdgeType
    label: str | None
    styles: list[str]


class GraphIR:
    """The graph intermediate representation built from an AST Graph."""

    def __init__(
        self,
        digraph: nx.MultiDiGraph,
        direction: Direction,
        subgraph_members: list[tuple[str, list[str]]],
    ) -> None:
        self.digraph = digraph
        self.direction = direction
        self.subgraph_members = subgraph_members

    @classmethod
    def from_ast(cls, ast_graph: ast.Graph) -> GraphIR:
        digraph: nx.MultiDiGraph = nx.MultiDiGraph()
        subgraph_members: list[tuple[str, list[str]]] = []

        for node in ast_graph.nodes:
            _add_node_if_absent(digraph, node, subgraph_name=None)
        for sg in ast_graph.subgraphs:
            _collect_subgraph(sg, digraph, subgraph_members)

        for edge in ast_graph.edges:
            _add_edge(digraph, edge)
        for sg in ast_graph.subgraphs:
            _collect_subgraph_edges(sg, digraph)

        return cls(digraph=digraph, direction=ast_graph.direction, subgraph_members=subgraph_members)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def node_data(self, node_id: str) -> NodeData:
        return self.digraph.nodes[node_id]["data"]

    def edges(self) -> list[tuple[str, str, EdgeData]]:
        """Edges in definition order."""
        return [(src, tgt, attrs["data"]) for src, tgt, attrs in self.digraph.edges(data=True)]

    def is_dag(self) -> bool:
        return nx.is_directed_acyclic_graph(self.digraph)


def _add_node_if_absent(digraph: nx.MultiDiGraph, node: ast.Node, subgraph_name: str | None) -> None:
    if node.id in digraph:
        data = digraph.nodes[node.id]["data"]
        if data.subgraph is None:
            data.subgraph = subgraph_name
        return
    data = NodeData(
        id=node.id,
        label=node.label,
        shape=node.shape,
        classes=list(node.classes),
        styles=list(node.styles),
        subgraph=subgraph_name,
    )
    digraph.add_node(node.id, data=data)


def _ensure_node(digraph: nx.MultiDiGraph, node_id: str) -> None:
    if node_id not in digraph:
        data = NodeData(id=node_id, label=node_id, shape=NodeShape.Rectangle, classes=[], styles=[])
        digraph.add_node(node_id, data=data)


def _add_edge(digraph: nx.MultiDiGraph, edge: ast.Edge) -> None:
    _ensure_node(digraph, edge.from_id)
    _ensure_node(digraph, edge.to_id)
    data = EdgeData(edge_type=edge.edge_type, label=edge.label, styles=list(edge.styles))
    digraph.add_edge(edge.from_id, edge.to_id, data=data)


def _collect_subgraph(
    sg: ast.Subgraph,
    digraph: nx.MultiDiGraph,
    subgraph_members: list[tuple[str, list[str]]],
) -> None:
    member_ids: list[str] = []
    for node in sg.nodes:
        _add_node_if_absent(digraph, node, subgraph_name=sg.name)
        member_ids.append(node.id)
    subgraph_members.append((sg.name, member_ids))
    for nested in sg.subgraphs:
        _collect_subgraph(nested, digraph, subgraph_members)


def _collect_subgraph_edges(sg: ast.Subgraph, digraph: nx.MultiDiGraph) -> None:
    for edge in sg.edges:
        _add_edge(digraph, edge)
    for nested in sg.subgraphs:
        _collect_subgraph_edges(nested, digraph)
