"""Diagram renderers drawing into a scratch surface."""

from mermaid_svg.renderers.base import BindFunctions, ClassProvider, Renderer
from mermaid_svg.renderers.flowchart import FlowchartRenderer
from mermaid_svg.renderers.gantt import GanttRenderer
from mermaid_svg.renderers.info import InfoRenderer
from mermaid_svg.renderers.sequence import SequenceRenderer

__all__ = [
    "BindFunctions",
    "ClassProvider",
    "FlowchartRenderer",
    "GanttRenderer",
    "InfoRenderer",
    "Renderer",
    "SequenceRenderer",
]
