"""Flowchart renderer: lays out a GraphIR and draws it as svg."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from mermaid_svg.ir.ast import Click, Graph
from mermaid_svg.ir.graph import GraphIR, NodeData
from mermaid_svg.layout.layered import LayeredLayout
from mermaid_svg.layout.types import LayoutEdge, LayoutNode
from mermaid_svg.parsers.dot import DotParser
from mermaid_svg.parsers.flowchart import FlowchartParser
from mermaid_svg.renderers.base import BindFunctions
from mermaid_svg.renderers.svg import add_arrowhead, fmt, html_label, multiline_text, set_size, sub, text_size
from mermaid_svg.surface import ScratchSurface
from mermaid_svg.types import NodeShape

logger = logging.getLogger(__name__)

FONT_SIZE = 14
PADDING_X = 15
PADDING_Y = 10
CLUSTER_PADDING = 15

DEFAULT_CLASS = {
    "styles": [],
    "clusterStyles": ["rx:4px", "fill: rgb(255, 255, 222)", "rx: 4px", "stroke: rgb(170, 170, 51)", "stroke-width: 1px"],
    "nodeLabelStyles": [
        "fill:#000",
        "stroke:none",
        "font-weight:300",
        'font-family:"Helvetica Neue",Helvetica,Arial,sans-serf',
        "font-size:14px",
    ],
    "edgeLabelStyles": [
        "fill:#000",
        "stroke:none",
        "font-weight:300",
        'font-family:"Helvetica Neue",Helvetica,Arial,sans-serf',
        "font-size:14px",
    ],
}

_EDGE_STROKES = {
    "normal": "stroke-width: 1.5px; fill: none;",
    "dotted": "stroke-width: 1.5px; stroke-dasharray: 3; fill: none;",
    "thick": "stroke-width: 3.5px; fill: none;",
}


def _parse(text: str, is_dot: bool) -> Graph:
    parser = DotParser() if is_dot else FlowchartParser()
    return parser.parse(text)


def node_size(data: NodeData) -> tuple[float, float]:
    w, h = text_size(data.label, FONT_SIZE)
    w += 2 * PADDING_X
    h += 2 * PADDING_Y
    if data.shape == NodeShape.Diamond:
        side = w + h
        return side, side
    if data.shape == NodeShape.Circle:
        side = max(w, h)
        return side, side
    if data.shape == NodeShape.Odd:
        return w + h / 2, h
    return w, h


def _points_attr(points: list[tuple[float, float]]) -> str:
    return " ".join(f"{fmt(x)},{fmt(y)}" for x, y in points)


def make_bind_functions(clicks: list[Click]) -> BindFunctions:
    """Bind click callbacks and tooltips onto node elements by id."""

    def bind_functions(element: ET.Element) -> list[str]:
        bound: list[str] = []
        by_id = {el.get("id"): el for el in element.iter() if el.get("id")}
        for click in clicks:
            node_el = by_id.get(click.node_id)
            if node_el is None:
                logger.debug("Click target %s not found", click.node_id)
                continue
            node_el.set("onclick", f"{click.callback}('{click.node_id}')")
            node_el.set("class", f"{node_el.get('class', '')} clickable".strip())
            if click.tooltip:
                sub(node_el, "title", click.tooltip)
            bound.append(click.node_id)
        return bound

    return bind_functions


class FlowchartRenderer:
    """Renders ``graph``/``flowchart`` and dot definitions."""

    def __init__(self) -> None:
        self.conf: dict = {"htmlLabels": True, "useMaxWidth": True}

    def set_config(self, conf: dict) -> None:
        self.conf.update(conf)

    def get_classes(self, text: str, is_dot: bool = False) -> dict[str, dict]:
        graph = _parse(text, is_dot)
        classes: dict[str, dict] = {name: {"styles": list(cd.styles)} for name, cd in graph.class_defs.items()}
        if "default" not in classes:
            classes["default"] = {key: list(value) for key, value in DEFAULT_CLASS.items()}
        return classes

    def draw(self, text: str, surface: ScratchSurface, is_dot: bool = False) -> BindFunctions:
        graph = _parse(text, is_dot)
        gir = GraphIR.from_ast(graph)
        sizes = {node_id: node_size(gir.node_data(node_id)) for node_id in gir.digraph.nodes}
        result = LayeredLayout().layout(gir, sizes)
        logger.debug("Flowchart %s laid out: %d nodes, %d edges", surface.id, gir.node_count(), gir.edge_count())

        marker_id = f"arrowhead-{surface.id}"
        add_arrowhead(surface.svg, marker_id)
        root = sub(surface.group, "g", class_="output")
        clusters = sub(root, "g", class_="clusters")
        edge_paths = sub(root, "g", class_="edgePaths")
        edge_labels = sub(root, "g", class_="edgeLabels")
        nodes_el = sub(root, "g", class_="nodes")

        min_x, min_y, max_x, max_y = 0.0, 0.0, result.width, result.height
        for name, members in gir.subgraph_members:
            bounds = [result.nodes[m].bounds() for m in members if m in result.nodes]
            if not bounds:
                continue
            x0 = min(b[0] for b in bounds) - CLUSTER_PADDING
            y0 = min(b[1] for b in bounds) - CLUSTER_PADDING - FONT_SIZE * 1.5
            x1 = max(b[2] for b in bounds) + CLUSTER_PADDING
            y1 = max(b[3] for b in bounds) + CLUSTER_PADDING
            min_x, min_y = min(min_x, x0), min(min_y, y0)
            max_x, max_y = max(max_x, x1), max(max_y, y1)
            cluster = sub(clusters, "g", class_="cluster", id=name)
            sub(cluster, "rect", x=x0, y=y0, width=x1 - x0, height=y1 - y0)
            sub(cluster, "text", name, x=(x0 + x1) / 2, y=y0 + FONT_SIZE * 1.2, text_anchor="middle")

        for edge in result.edges:
            self._draw_edge(edge_paths, edge_labels, edge, marker_id)
        for node_id, ln in result.nodes.items():
            self._draw_node(nodes_el, gir.node_data(node_id), ln)

        set_size(surface.svg, max_x - min_x, max_y - min_y, bool(self.conf.get("useMaxWidth")), min_x, min_y)
        return make_bind_functions(graph.clicks)

    def _label(self, parent: ET.Element, text: str, x: float, y: float, class_: str) -> None:
        w, h = text_size(text, FONT_SIZE)
        label = sub(parent, "g", class_=class_, transform=f"translate({fmt(x - w / 2)},{fmt(y - h / 2)})")
        if self.conf.get("htmlLabels"):
            html_label(label, text, w, h)
        else:
            multiline_text(label, text, w / 2, FONT_SIZE, FONT_SIZE, text_anchor="middle")

    def _draw_node(self, parent: ET.Element, data: NodeData, ln: LayoutNode) -> None:
        classes = " ".join(data.classes) or "default"
        g = sub(parent, "g", class_=f"node {classes}", id=data.id, transform=f"translate({fmt(ln.x)},{fmt(ln.y)})")
        style = ";".join(data.styles) or None
        w, h = ln.width, ln.height
        if data.shape == NodeShape.Diamond:
            pts = [(0, -h / 2), (w / 2, 0), (0, h / 2), (-w / 2, 0)]
            sub(g, "polygon", points=_points_attr(pts), style=style)
        elif data.shape == NodeShape.Circle:
            sub(g, "circle", r=w / 2, style=style)
        elif data.shape == NodeShape.Odd:
            notch = h / 2
            pts = [(-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2), (-w / 2 + notch, 0)]
            sub(g, "polygon", points=_points_attr(pts), style=style)
        else:
            rx = 5 if data.shape == NodeShape.Rounded else 0
            sub(g, "rect", x=-w / 2, y=-h / 2, width=w, height=h, rx=rx, ry=rx, style=style)
        self._label(g, data.label, 0, 0, "label")

    def _draw_edge(self, paths: ET.Element, labels: ET.Element, edge: LayoutEdge, marker_id: str) -> None:
        etype = edge.data.edge_type
        style = _EDGE_STROKES[etype.stroke()] + "".join(f" {s};" for s in edge.data.styles)
        g = sub(paths, "g", class_="edgePath")
        d = "M" + " L".join(f"{fmt(x)},{fmt(y)}" for x, y in edge.points)
        sub(
            g,
            "path",
            class_="path",
            d=d,
            style=style,
            marker_end=f"url(#{marker_id})" if etype.has_arrow() else None,
        )
        if edge.data.label:
            mid = edge.points[len(edge.points) // 2 - 1] if len(edge.points) > 2 else edge.points[0]
            end = edge.points[len(edge.points) // 2]
            self._label(labels, edge.data.label, (mid[0] + end[0]) / 2, (mid[1] + end[1]) / 2, "edgeLabel")
