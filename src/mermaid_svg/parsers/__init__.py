"""Diagram parsers, one per grammar."""

from mermaid_svg.parsers.dot import DotParser
from mermaid_svg.parsers.flowchart import FlowchartParser
from mermaid_svg.parsers.gantt import GanttParser
from mermaid_svg.parsers.info import InfoParser
from mermaid_svg.parsers.sequence import SequenceParser

__all__ = [
    "DotParser",
    "FlowchartParser",
    "GanttParser",
    "InfoParser",
    "SequenceParser",
]
