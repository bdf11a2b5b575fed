"""Layered layout for flowcharts."""

from mermaid_svg.layout.layered import (
    LayeredLayout,
    assign_layers,
    intersect_rect,
    order_layers,
    remove_cycles,
)
from mermaid_svg.layout.types import LayoutEdge, LayoutNode, LayoutResult

__all__ = [
    "LayeredLayout",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "assign_layers",
    "intersect_rect",
    "order_layers",
    "remove_cycles",
]
