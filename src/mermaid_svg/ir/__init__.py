"""Intermediate representation: flowchart AST and GraphIR."""

from mermaid_svg.ir.ast import ClassDef, Click, Edge, Graph, Node, Subgraph
from mermaid_svg.ir.graph import EdgeData, GraphIR, NodeData

__all__ = [
    "ClassDef",
    "Click",
    "Edge",
    "EdgeData",
    "Graph",
    "GraphIR",
    "Node",
    "NodeData",
    "Subgraph",
]
