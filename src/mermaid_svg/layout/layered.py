"""Layered (Sugiyama-style) layout for flowcharts.

Phases:
  1. Cycle removal (DFS back edges are reversed)
  2. Layer assignment (longest path)
  3. Crossing reduction (barycenter sweeps)
  4. Coordinate assignment, honouring the graph direction
  5. Edge clipping at node boundaries
"""

from __future__ import annotations

import networkx as nx

from mermaid_svg.ir.graph import GraphIR
from mermaid_svg.layout.types import LayoutEdge, LayoutNode, LayoutResult
from mermaid_svg.types import Direction

NODE_SEP: float = 50
RANK_SEP: float = 50
MARGIN: float = 20
SWEEPS: int = 4


# ─── Cycle Removal ───────────────────────────────────────────────────────────


def remove_cycles(graph: nx.MultiDiGraph) -> nx.DiGraph:
    """Return an acyclic simple DiGraph with back edges reversed and self loops dropped."""
    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(graph.nodes)

    back_edges: set[tuple[str, str]] = set()
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in graph.nodes:
        if root in visited:
            continue
        stack: list[tuple[str, list[str]]] = [(root, list(graph.successors(root)))]
        visited.add(root)
        on_stack.add(root)
        while stack:
            node, pending = stack[-1]
            if not pending:
                stack.pop()
                on_stack.discard(node)
                continue
            succ = pending.pop(0)
            if succ in on_stack:
                back_edges.add((node, succ))
            elif succ not in visited:
                visited.add(succ)
                on_stack.add(succ)
                stack.append((succ, list(graph.successors(succ))))

    for src, tgt in graph.edges():
        if src == tgt:
            continue
        if (src, tgt) in back_edges:
            dag.add_edge(tgt, src)
        else:
            dag.add_edge(src, tgt)
    return dag


# ─── Layer Assignment ────────────────────────────────────────────────────────


def assign_layers(dag: nx.DiGraph) -> dict[str, int]:
    """Longest-path layering: every edge goes down at least one layer."""
    layers: dict[str, int] = {node: 0 for node in dag.nodes}
    for node in nx.topological_sort(dag):
        for succ in dag.successors(node):
            layers[succ] = max(layers[succ], layers[node] + 1)
    return layers


# ─── Crossing Reduction ──────────────────────────────────────────────────────


def _barycenter(neighbors: list[str], position: dict[str, int]) -> float | None:
    placed = [position[n] for n in neighbors if n in position]
    if not placed:
        return None
    return sum(placed) / len(placed)


def order_layers(dag: nx.DiGraph, layers: dict[str, int]) -> list[list[str]]:
    """Group nodes by layer (definition order) and reorder by barycenter."""
    count = (max(layers.values()) + 1) if layers else 0
    ordering: list[list[str]] = [[] for _ in range(count)]
    for node in dag.nodes:
        ordering[layers[node]].append(node)

    for sweep in range(SWEEPS):
        downward = sweep % 2 == 0
        indices = range(1, count) if downward else range(count - 2, -1, -1)
        for i in indices:
            ref = ordering[i - 1] if downward else ordering[i + 1]
            position = {n: p for p, n in enumerate(ref)}
            current = {n: p for p, n in enumerate(ordering[i])}

            def key(node: str) -> float:
                neighbors = list(dag.predecessors(node)) if downward else list(dag.successors(node))
                bc = _barycenter(neighbors, position)
                return bc if bc is not None else current[node]

            ordering[i] = sorted(ordering[i], key=key)
    return ordering


# ─── Edge Clipping ───────────────────────────────────────────────────────────


def intersect_rect(node: LayoutNode, point: tuple[float, float]) -> tuple[float, float]:
    """Where the line from the node centre towards ``point`` leaves the node box."""
    dx = point[0] - node.x
    dy = point[1] - node.y
    w = node.width / 2
    h = node.height / 2
    if dx == 0 and dy == 0:
        return (node.x, node.y)
    if abs(dy) * w > abs(dx) * h:
        if dy < 0:
            h = -h
        return (node.x + h * dx / dy, node.y + h)
    if dx < 0:
        w = -w
    return (node.x + w, node.y + w * dy / dx)


# ─── Layout Engine ───────────────────────────────────────────────────────────


class LayeredLayout:
    """Positions nodes of a GraphIR given their box sizes."""

    def __init__(self, node_sep: float = NODE_SEP, rank_sep: float = RANK_SEP, margin: float = MARGIN) -> None:
        self.node_sep = node_sep
        self.rank_sep = rank_sep
        self.margin = margin

    def layout(self, gir: GraphIR, sizes: dict[str, tuple[float, float]]) -> LayoutResult:
        dag = remove_cycles(gir.digraph)
        layers = assign_layers(dag)
        ordering = order_layers(dag, layers)
        horizontal = gir.direction.is_horizontal()

        def cross(node_id: str) -> float:
            w, h = sizes[node_id]
            return h if horizontal else w

        def along(node_id: str) -> float:
            w, h = sizes[node_id]
            return w if horizontal else h

        spans = [sum(cross(n) for n in layer) + self.node_sep * max(0, len(layer) - 1) for layer in ordering]
        max_span = max(spans, default=0.0)
        thickness = [max((along(n) for n in layer), default=0.0) for layer in ordering]
        total_rank = sum(thickness) + self.rank_sep * max(0, len(ordering) - 1)

        nodes: dict[str, LayoutNode] = {}
        rank_pos = 0.0
        for layer_idx, layer in enumerate(ordering):
            rank_center = rank_pos + thickness[layer_idx] / 2
            if gir.direction in (Direction.BT, Direction.RL):
                rank_center = total_rank - rank_center
            cross_pos = (max_span - spans[layer_idx]) / 2
            for order, node_id in enumerate(layer):
                w, h = sizes[node_id]
                cross_center = cross_pos + cross(node_id) / 2
                if horizontal:
                    x, y = rank_center, cross_center
                else:
                    x, y = cross_center, rank_center
                nodes[node_id] = LayoutNode(
                    id=node_id,
                    layer=layer_idx,
                    order=order,
                    x=x + self.margin,
                    y=y + self.margin,
                    width=w,
                    height=h,
                )
                cross_pos += cross(node_id) + self.node_sep
            rank_pos += thickness[layer_idx] + self.rank_sep

        edges = [self._route(nodes[src], nodes[tgt], data) for src, tgt, data in gir.edges()]
        if horizontal:
            width, height = total_rank, max_span
        else:
            width, height = max_span, total_rank
        return LayoutResult(nodes=nodes, edges=edges, width=width + 2 * self.margin, height=height + 2 * self.margin)

    def _route(self, src: LayoutNode, tgt: LayoutNode, data) -> LayoutEdge:
        if src.id == tgt.id:
            right = src.x + src.width / 2
            top = src.y - src.height / 4
            bottom = src.y + src.height / 4
            loop = right + self.node_sep / 2
            points = [(right, top), (loop, top), (loop, bottom), (right, bottom)]
        else:
            points = [intersect_rect(src, (tgt.x, tgt.y)), intersect_rect(tgt, (src.x, src.y))]
        return LayoutEdge(from_id=src.id, to_id=tgt.id, data=data, points=points)
