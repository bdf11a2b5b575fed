"""Render orchestration.

``MermaidAPI`` owns a configuration and a document. ``render`` detects the
diagram type, pushes the matching configuration namespace into the
renderer, draws into a scratch surface, packages the svg markup and hands it
to the caller's callback. The scratch surface never outlives the call.

    api = MermaidAPI()
    api.initialize({"flowchart": {"htmlLabels": False}})
    api.render("graph1", "graph TB\\na-->b", lambda svg, bind: print(svg))
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping

from mermaid_svg import diagrams
from mermaid_svg.config import Configuration
from mermaid_svg.css import clone_css_styles
from mermaid_svg.detect import DiagramType, detect_type
from mermaid_svg.errors import MermaidError, ParseError, RenderError
from mermaid_svg.renderers.base import BindFunctions, ClassProvider
from mermaid_svg.surface import Document, ScratchSurface, scratch_surface
from mermaid_svg.version import __version__

logger = logging.getLogger(__name__)

RenderCallback = Callable[[str, BindFunctions | None], object]
ParseErrorHandler = Callable[[Exception, dict], object]

_FRAGMENT_URL_RE = re.compile(r"url\(#")


def rewrite_fragment_urls(markup: str, base_url: str) -> str:
    """Qualify ``url(#name)`` references with the document url.

    Keeps markers and gradients addressable when the svg is embedded in a
    page that sets a ``<base>`` tag.
    """
    return _FRAGMENT_URL_RE.sub(lambda _: f"url({base_url}#", markup)


class MermaidAPI:
    """Drives the diagram subsystems behind one entry point."""

    def __init__(
        self,
        config: Mapping | None = None,
        document: Document | None = None,
        parse_error_handler: ParseErrorHandler | None = None,
    ) -> None:
        self.config = Configuration(config)
        self.document = document
        self.parse_error_handler = parse_error_handler

    # ── Configuration ─────────────────────────────────────────────────────────

    def initialize(self, options: Mapping | None = None) -> None:
        """Merge ``options`` into the configuration; anything but a mapping is ignored."""
        if isinstance(options, Mapping):
            self.config.merge(options)

    def get_config(self) -> dict:
        return self.config.resolve()

    # ── Parsing ───────────────────────────────────────────────────────────────

    def detect_type(self, text: str) -> DiagramType | None:
        return detect_type(text)

    def parse(self, text: str) -> bool:
        """True iff ``text`` parses under its detected grammar."""
        diagram_type = detect_type(text)
        if diagram_type is None:
            self.parse_error(ParseError("No diagram type detected", {"text": text}), {"text": text})
            return False
        outcome = diagrams.parse(text, diagram_type)
        if outcome.error is not None:
            self.parse_error(outcome.error, outcome.error.context)
        return outcome.ok

    def parse_error(self, err: Exception, context: dict | None = None) -> None:
        """Route a syntax error to the registered handler, or to the log."""
        if self.parse_error_handler is not None:
            self.parse_error_handler(err, context or {})
        else:
            logger.debug("Syntax error: %s", err)

    # ── Rendering ─────────────────────────────────────────────────────────────

    def render(
        self,
        id: str,
        text: str,
        callback: RenderCallback | None = None,
        container: str | ET.Element | None = None,
    ) -> None:
        """Render ``text`` to svg markup and pass it to ``callback``.

        Parse and renderer failures are routed through ``parse_error``; the
        callback is not invoked for them.
        """
        if self.document is None:
            logger.info("No document available, skipping render of %s", id)
            return
        try:
            self._render(id, text, callback, container)
        except MermaidError as err:
            self.parse_error(err, getattr(err, "context", {"text": text}))

    def _render(
        self,
        id: str,
        text: str,
        callback: RenderCallback | None,
        container: str | ET.Element | None,
    ) -> None:
        diagram_type = detect_type(text)
        if diagram_type is None:
            logger.debug("Unrecognized diagram %s, nothing rendered", id)
            self._deliver(id, "", None, callback)
            return

        definition = diagrams.DIAGRAMS[diagram_type]
        with scratch_surface(self.document, id, container) as surface:
            bind_functions = self._draw(definition, text, surface)
            markup = rewrite_fragment_urls(surface.markup(), self.document.base_url())
            self._deliver(id, markup, bind_functions, callback)

    def _draw(
        self,
        definition: diagrams.DiagramDefinition,
        text: str,
        surface: ScratchSurface,
    ) -> BindFunctions | None:
        renderer = definition.renderer()
        if definition.config_key is not None:
            renderer.set_config(self.config.namespace(definition.config_key) or {})
        try:
            bind_functions = renderer.draw(text, surface, is_dot=definition.is_dot)
            if self.config.resolve().get("cloneCssStyles"):
                classes = renderer.get_classes(text, definition.is_dot) if isinstance(renderer, ClassProvider) else {}
                clone_css_styles(surface.svg, classes, self.document.stylesheets)
        except ParseError:
            raise
        except Exception as err:
            logger.exception("Renderer for %s failed", definition.diagram_type.value)
            raise RenderError(f"Rendering {definition.diagram_type.value} failed: {err}") from err
        return bind_functions

    def _deliver(
        self,
        id: str,
        markup: str,
        bind_functions: BindFunctions | None,
        callback: RenderCallback | None,
    ) -> None:
        if callback is None:
            logger.warning("No callback given for render of %s, output discarded", id)
            return
        callback(markup, bind_functions)

    def version(self) -> str:
        return __version__
