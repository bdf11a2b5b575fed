"""Diagram type detection.

Classification looks at the first significant token of the text (blank lines
and ``%%`` comments are skipped) and walks ``DETECTION_RULES`` in order; the
first keyword that matches wins.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class DiagramType(Enum):
    FLOWCHART = "graph"
    DOT_GRAPH = "dotGraph"
    SEQUENCE = "sequenceDiagram"
    GANTT = "gantt"
    INFO = "info"


# Order matters: it decides ties between keywords sharing a prefix.
DETECTION_RULES: tuple[tuple[str, DiagramType], ...] = (
    ("sequencediagram", DiagramType.SEQUENCE),
    ("digraph", DiagramType.DOT_GRAPH),
    ("info", DiagramType.INFO),
    ("gantt", DiagramType.GANTT),
    ("flowchart", DiagramType.FLOWCHART),
    ("graph", DiagramType.FLOWCHART),
)

_FIRST_TOKEN_RE = re.compile(r"\w+")


def first_token(text: str) -> str | None:
    """Return the first word of the first significant line, lower-cased."""
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("%%"):
            continue
        m = _FIRST_TOKEN_RE.match(line)
        return m.group(0).lower() if m else None
    return None


def detect_type(text: str) -> DiagramType | None:
    """Detect the diagram type of ``text``; ``None`` when no rule matches."""
    token = first_token(text)
    if token is not None:
        for keyword, diagram_type in DETECTION_RULES:
            if token == keyword:
                return diagram_type
    logger.debug("No diagram type detected for first token %r", token)
    return None
