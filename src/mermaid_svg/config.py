"""Centralized configuration for mermaid-svg.

The configuration is a tree at most two levels deep: level-1 keys are either
global flags (``cloneCssStyles``, ``startOnLoad``) or per-diagram namespaces
(``flowchart``, ``sequenceDiagram``, ``gantt``).
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

# Ordered (strftime format, predicate) pairs; the first predicate that holds
# for a tick picks its format.
AXIS_FORMATTER: list[tuple[str, object]] = [
    ("%I:%M", lambda d: d.hour),
    ("w. %U", lambda d: d.weekday() == 0),
    ("%a %d", lambda d: d.weekday() != 6 and d.day != 1),
    ("%b %d", lambda d: d.day != 1),
    ("%m-%y", lambda d: d.month != 1),
]

DEFAULT_CONFIG: dict = {
    # Copy matching stylesheet rules into the generated svg.
    "cloneCssStyles": True,
    "startOnLoad": True,
    "flowchart": {
        # Render labels as html inside foreignObject instead of svg text.
        "htmlLabels": True,
        "useMaxWidth": True,
    },
    "sequenceDiagram": {
        "diagramMarginX": 50,
        "diagramMarginY": 10,
        "actorMargin": 50,
        "width": 150,
        "height": 65,
        "boxMargin": 10,
        "boxTextMargin": 5,
        "noteMargin": 10,
        "messageMargin": 35,
        "mirrorActors": True,
        # Prolongs the edge of the diagram downwards.
        "bottomMarginAdj": 1,
        "useMaxWidth": True,
    },
    "gantt": {
        "titleTopMargin": 25,
        "barHeight": 20,
        "barGap": 4,
        "topPadding": 50,
        "sidePadding": 75,
        "gridLineStartPadding": 35,
        "fontSize": 11,
        "fontFamily": '"Open-Sans", "sans-serif"',
        "numberSectionStyles": 3,
        "axisFormatter": AXIS_FORMATTER,
    },
}


class Configuration:
    """Hierarchically overridable settings owned by one ``MermaidAPI``.

    Merging never replaces a namespace wholesale: each level-2 key is copied
    into the existing (or newly created) namespace. Unknown keys are stored
    as-is; nothing is validated.
    """

    def __init__(self, overrides: Mapping | None = None) -> None:
        self._config: dict = copy.deepcopy(DEFAULT_CONFIG)
        if overrides:
            self.merge(overrides)

    def resolve(self) -> dict:
        """Return the live effective configuration."""
        return self._config

    def namespace(self, name: str) -> dict | None:
        value = self._config.get(name)
        return value if isinstance(value, dict) else None

    def merge(self, overrides: Mapping) -> None:
        for key, value in overrides.items():
            if isinstance(value, Mapping):
                target = self._config.get(key)
                if not isinstance(target, dict):
                    target = {}
                    self._config[key] = target
                for sub_key, sub_value in value.items():
                    logger.debug("Setting config: %s %s to %r", key, sub_key, sub_value)
                    target[sub_key] = sub_value
            else:
                logger.debug("Setting config: %s to %r", key, value)
                self._config[key] = value

