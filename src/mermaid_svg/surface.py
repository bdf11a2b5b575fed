"""Scene graph and scratch drawing surfaces.

A ``Document`` is a small in-memory tree (``html > body``) built on
``xml.etree.ElementTree``. Every render call borrows a scratch surface
``div#d<id> > svg#<id> > g`` from it through ``scratch_surface``; the surface
is detached again when the ``with`` block exits, whatever happened inside.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from urllib.parse import urlsplit

from mermaid_svg.css import SelectorError, select

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
DEFAULT_LOCATION = "http://localhost/"


class Document:
    """The presentation tree render calls draw into."""

    def __init__(self, location: str = DEFAULT_LOCATION, stylesheets: list[str] | None = None) -> None:
        self.root = ET.Element("html")
        self.body = ET.SubElement(self.root, "body")
        self.location = location
        self.stylesheets: list[str] = list(stylesheets or [])

    def get_element_by_id(self, element_id: str) -> ET.Element | None:
        for el in self.root.iter():
            if el.get("id") == element_id:
                return el
        return None

    def select(self, anchor: str | ET.Element) -> ET.Element | None:
        """Resolve a css selector (first match) or an element already in the tree."""
        if isinstance(anchor, ET.Element):
            return anchor if self.contains(anchor) else None
        try:
            matches = select(self.root, anchor)
        except SelectorError:
            logger.warning("Unsupported container selector %r", anchor)
            return None
        return matches[0] if matches else None

    def contains(self, element: ET.Element) -> bool:
        return any(el is element for el in self.root.iter())

    def parent_of(self, element: ET.Element) -> ET.Element | None:
        for parent in self.root.iter():
            for child in parent:
                if child is element:
                    return parent
        return None

    def remove(self, element: ET.Element) -> bool:
        parent = self.parent_of(element)
        if parent is None:
            return False
        parent.remove(element)
        return True

    def base_url(self) -> str:
        """``protocol//host/path`` of the document location, without query or fragment."""
        parts = urlsplit(self.location)
        return f"{parts.scheme}://{parts.netloc}{parts.path}"


@dataclass
class ScratchSurface:
    """A temporary ``div > svg > g`` owned by one render call."""

    id: str
    container: ET.Element
    svg: ET.Element
    group: ET.Element

    def markup(self) -> str:
        """Serialized contents of the container (the svg element)."""
        return "".join(ET.tostring(child, encoding="unicode") for child in self.container)


@contextmanager
def scratch_surface(
    document: Document,
    svg_id: str,
    container: str | ET.Element | None = None,
) -> Iterator[ScratchSurface]:
    """Create ``div#d<svg_id>`` under ``container`` (or ``body``) and remove it on exit."""
    anchor = document.body
    if container is not None:
        found = document.select(container)
        if found is None:
            logger.warning("Container %r not found, drawing under body", container)
        else:
            anchor = found

    div = ET.SubElement(anchor, "div", {"id": f"d{svg_id}"})
    svg = ET.SubElement(div, "svg", {"id": svg_id, "width": "100%", "xmlns": SVG_NS})
    group = ET.SubElement(svg, "g")
    surface = ScratchSurface(id=svg_id, container=div, svg=svg, group=group)
    try:
        yield surface
    finally:
        anchor.remove(div)
        logger.debug("Removed scratch surface d%s", svg_id)
