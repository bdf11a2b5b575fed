"""Layout types shared by the layered layout and the flowchart renderer."""

from __future__ import annotations

from dataclasses import dataclass, field

from mermaid_svg.ir.graph import EdgeData


@dataclass
class LayoutNode:
    """A positioned node; ``x``/``y`` is the centre."""

    id: str
    layer: int
    order: int
    x: float
    y: float
    width: float
    height: float

    def bounds(self) -> tuple[float, float, float, float]:
        return (self.x - self.width / 2, self.y - self.height / 2, self.x + self.width / 2, self.y + self.height / 2)


@dataclass
class LayoutEdge:
    from_id: str
    to_id: str
    data: EdgeData
    points: list[tuple[float, float]] = field(default_factory=list)


@dataclass
class LayoutResult:
    nodes: dict[str, LayoutNode]
    edges: list[LayoutEdge]
    width: float
    height: float
