"""mermaid-svg: Mermaid-style diagram definitions to svg.

The module-level functions drive one process-wide ``MermaidAPI`` backed by
an in-memory document. Create a ``MermaidAPI`` directly for an isolated
configuration.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping

from mermaid_svg.api import MermaidAPI, ParseErrorHandler, RenderCallback, rewrite_fragment_urls
from mermaid_svg.config import DEFAULT_CONFIG, Configuration
from mermaid_svg.detect import DETECTION_RULES, DiagramType
from mermaid_svg.errors import MermaidError, ParseError, RenderError
from mermaid_svg.surface import Document
from mermaid_svg.version import __version__

__all__ = [
    "DEFAULT_CONFIG",
    "DETECTION_RULES",
    "Configuration",
    "DiagramType",
    "Document",
    "MermaidAPI",
    "MermaidError",
    "ParseError",
    "RenderError",
    "__version__",
    "default_api",
    "detect_type",
    "get_config",
    "initialize",
    "parse",
    "parse_error",
    "render",
    "rewrite_fragment_urls",
    "set_config",
    "set_parse_error_handler",
    "version",
]

default_api = MermaidAPI(document=Document())


def render(
    id: str,
    text: str,
    callback: RenderCallback | None = None,
    container: str | ET.Element | None = None,
) -> None:
    default_api.render(id, text, callback, container)


def parse(text: str) -> bool:
    return default_api.parse(text)


def initialize(options: Mapping | None = None) -> None:
    default_api.initialize(options)


def set_config(options: Mapping) -> None:
    """Same merge as ``initialize``."""
    default_api.initialize(options)


def get_config() -> dict:
    return default_api.get_config()


def detect_type(text: str) -> DiagramType | None:
    return default_api.detect_type(text)


def parse_error(err: Exception, context: dict | None = None) -> None:
    default_api.parse_error(err, context)


def set_parse_error_handler(handler: ParseErrorHandler | None) -> None:
    """Register a global handler for syntax errors; None restores logging."""
    default_api.parse_error_handler = handler


def version() -> str:
    return __version__
