"""Small helpers for building svg elements with ElementTree."""

from __future__ import annotations

import xml.etree.ElementTree as ET

XHTML_NS = "http://www.w3.org/1999/xhtml"

# Average glyph width relative to the font size; good enough for box sizing.
CHAR_WIDTH_RATIO = 0.6
LINE_HEIGHT_RATIO = 1.2


def fmt(value: object) -> str:
    if isinstance(value, float):
        text = f"{value:.2f}".rstrip("0").rstrip(".")
        return "0" if text == "-0" else text
    return str(value)


def _attr_name(name: str) -> str:
    if name == "class_":
        return "class"
    return name.rstrip("_").replace("_", "-")


def sub(parent: ET.Element, tag: str, text: str | None = None, **attrs: object) -> ET.Element:
    """Append a child element; ``stroke_width=2`` becomes ``stroke-width="2"``."""
    el = ET.SubElement(parent, tag, {_attr_name(k): fmt(v) for k, v in attrs.items() if v is not None})
    if text is not None:
        el.text = text
    return el


def text_size(text: str, font_size: float = 14) -> tuple[float, float]:
    """Estimated (width, height) of a possibly multi-line label."""
    lines = text.split("\n") or [""]
    width = max(len(line) for line in lines) * font_size * CHAR_WIDTH_RATIO
    height = len(lines) * font_size * LINE_HEIGHT_RATIO
    return width, height


def multiline_text(parent: ET.Element, text: str, x: float, y: float, font_size: float = 14, **attrs: object) -> ET.Element:
    """A ``text`` element with one ``tspan`` per line, first baseline at ``y``."""
    el = sub(parent, "text", x=x, y=y, **attrs)
    for i, line in enumerate(text.split("\n")):
        sub(el, "tspan", line, x=x, dy=0 if i == 0 else font_size * LINE_HEIGHT_RATIO)
    return el


def html_label(parent: ET.Element, text: str, width: float, height: float, **attrs: object) -> ET.Element:
    """A ``foreignObject`` holding an xhtml ``div`` with the label."""
    fo = sub(parent, "foreignObject", width=width, height=height, **attrs)
    div = sub(fo, "div", xmlns=XHTML_NS, style="display: inline-block; white-space: nowrap;")
    lines = text.split("\n")
    span = sub(div, "span", lines[0])
    for line in lines[1:]:
        br = sub(span, "br")
        br.tail = line
    return fo


def ensure_defs(svg: ET.Element) -> ET.Element:
    for child in svg:
        if child.tag == "defs":
            return child
    defs = ET.Element("defs")
    svg.insert(0, defs)
    return defs


def add_arrowhead(svg: ET.Element, marker_id: str = "arrowhead") -> None:
    """Triangle marker used at the end of directed lines."""
    marker = sub(
        ensure_defs(svg),
        "marker",
        id=marker_id,
        refX=5,
        refY=2,
        markerWidth=6,
        markerHeight=4,
        orient="auto",
    )
    sub(marker, "path", d="M 0,0 V 4 L6,2 Z")


def add_crosshead(svg: ET.Element, marker_id: str = "crosshead") -> None:
    """Cross marker used for lost messages."""
    marker = sub(
        ensure_defs(svg),
        "marker",
        id=marker_id,
        markerWidth=15,
        markerHeight=8,
        orient="auto",
        refX=16,
        refY=4,
    )
    sub(marker, "path", fill="black", stroke="#000000", style="stroke-dasharray: 0, 0;", stroke_width="1px", d="M 9,2 V 6 L16,4 Z")
    sub(marker, "path", fill="none", stroke="#000000", style="stroke-dasharray: 0, 0;", stroke_width="1px", d="M 0,1 L 6,7 M 6,1 L 0,7")


def set_size(svg: ET.Element, width: float, height: float, use_max_width: bool, min_x: float = 0, min_y: float = 0) -> None:
    """Size the svg absolutely, or let it scale up to its natural width."""
    svg.set("viewBox", f"{fmt(min_x)} {fmt(min_y)} {fmt(width)} {fmt(height)}")
    if use_max_width:
        svg.set("width", "100%")
        svg.set("style", f"max-width:{fmt(width)}px;")
        svg.attrib.pop("height", None)
    else:
        svg.set("width", fmt(width))
        svg.set("height", fmt(height))
