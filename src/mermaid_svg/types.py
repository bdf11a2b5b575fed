"""Shared type definitions for flowchart diagrams.

Enums used by the flowchart and dot parsers, the layout and the renderer.
"""

from __future__ import annotations

from enum import Enum, auto


class Direction(Enum):
    LR = auto()
    RL = auto()
    TD = auto()
    BT = auto()

    @classmethod
    def default(cls) -> Direction:
        return cls.TD

    def is_horizontal(self) -> bool:
        return self in (Direction.LR, Direction.RL)


class NodeShape(Enum):
    Rectangle = auto()  # id[Label]
    Rounded = auto()  # id(Label)
    Diamond = auto()  # id{Label}
    Circle = auto()  # id((Label))
    Odd = auto()  # id>Label]

    @classmethod
    def default(cls) -> NodeShape:
        return cls.Rectangle


class EdgeType(Enum):
    Arrow = auto()  # -->
    Line = auto()  # ---
    DottedArrow = auto()  # -.->
    DottedLine = auto()  # -.-
    ThickArrow = auto()  # ==>
    ThickLine = auto()  # ===

    def has_arrow(self) -> bool:
        return self in (EdgeType.Arrow, EdgeType.DottedArrow, EdgeType.ThickArrow)

    def stroke(self) -> str:
        if self in (EdgeType.DottedArrow, EdgeType.DottedLine):
            return "dotted"
        if self in (EdgeType.ThickArrow, EdgeType.ThickLine):
            return "thick"
        return "normal"
