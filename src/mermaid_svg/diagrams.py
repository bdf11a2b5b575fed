"""The closed table of supported diagram types.

Each row bundles what the orchestrator needs for one ``DiagramType``: the
parser, a renderer factory, the configuration namespace pushed into the
renderer, and whether it is the dot flavour of the flowchart grammar. Adding
a diagram type means adding one row.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from mermaid_svg.detect import DiagramType
from mermaid_svg.errors import ParseError
from mermaid_svg.parsers import DotParser, FlowchartParser, GanttParser, InfoParser, SequenceParser
from mermaid_svg.parsers.base import Parser
from mermaid_svg.renderers import FlowchartRenderer, GanttRenderer, InfoRenderer, SequenceRenderer
from mermaid_svg.renderers.base import Renderer
from mermaid_svg.version import __version__

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagramDefinition:
    diagram_type: DiagramType
    parser: Callable[[], Parser]
    renderer: Callable[[], Renderer]
    config_key: str | None
    is_dot: bool = False


DIAGRAMS: dict[DiagramType, DiagramDefinition] = {
    DiagramType.FLOWCHART: DiagramDefinition(DiagramType.FLOWCHART, FlowchartParser, FlowchartRenderer, "flowchart"),
    DiagramType.DOT_GRAPH: DiagramDefinition(DiagramType.DOT_GRAPH, DotParser, FlowchartRenderer, "flowchart", is_dot=True),
    DiagramType.SEQUENCE: DiagramDefinition(DiagramType.SEQUENCE, SequenceParser, SequenceRenderer, "sequenceDiagram"),
    DiagramType.GANTT: DiagramDefinition(DiagramType.GANTT, GanttParser, GanttRenderer, "gantt"),
    DiagramType.INFO: DiagramDefinition(DiagramType.INFO, InfoParser, lambda: InfoRenderer(__version__), None),
}


@dataclass
class ParseOutcome:
    """Result of parsing one definition; ``model`` is fresh for every call."""

    diagram_type: DiagramType
    model: object | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse(text: str, diagram_type: DiagramType) -> ParseOutcome:
    """Parse ``text`` with the grammar of ``diagram_type``; never raises."""
    definition = DIAGRAMS[diagram_type]
    try:
        model = definition.parser().parse(text)
    except ParseError as err:
        return ParseOutcome(diagram_type, error=err)
    except Exception as err:
        logger.debug("Parser for %s raised %r", diagram_type.value, err)
        wrapped = ParseError(str(err), {"text": text, "token": None, "line": None, "expected": None})
        wrapped.__cause__ = err
        return ParseOutcome(diagram_type, error=wrapped)
    return ParseOutcome(diagram_type, model=model)
