"""Copy css rules into a generated svg so it renders standalone.

Stylesheet rules are kept when their selector matches an element of the svg.
Classes defined by the diagram itself (flowchart ``classDef``) are turned
into rules scoped to the svg id.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

STYLE_TITLE = "mermaid-svg-internal-css"

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE_RE = re.compile(r"([^{}@]+)\{([^{}]*)\}")
_COMPOUND_RE = re.compile(r"(?P<tag>[A-Za-z][\w-]*|\*)?(?P<rest>(?:[#.][\w-]+)*)")


class SelectorError(ValueError):
    """The selector uses syntax the matcher does not support."""


@dataclass
class _Compound:
    tag: str | None = None
    ids: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)

    def matches(self, el: ET.Element) -> bool:
        if self.tag is not None and _local_name(el.tag) != self.tag:
            return False
        if any(el.get("id") != i for i in self.ids):
            return False
        el_classes = (el.get("class") or "").split()
        return all(c in el_classes for c in self.classes)


def _local_name(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _parse_compound(text: str) -> _Compound:
    m = _COMPOUND_RE.fullmatch(text)
    if m is None or not text:
        raise SelectorError(text)
    tag = m.group("tag")
    compound = _Compound(tag=None if tag in (None, "*") else tag)
    for part in re.findall(r"[#.][\w-]+", m.group("rest")):
        (compound.ids if part[0] == "#" else compound.classes).append(part[1:])
    return compound


def _parse_complex(text: str) -> list[tuple[str, _Compound]]:
    steps: list[tuple[str, _Compound]] = []
    combinator = " "
    for token in re.findall(r">|[^\s>]+", text):
        if token == ">":
            combinator = ">"
            continue
        steps.append((combinator, _parse_compound(token)))
        combinator = " "
    if not steps or combinator == ">":
        raise SelectorError(text)
    return steps


def _match_from(
    el: ET.Element,
    steps: list[tuple[str, _Compound]],
    index: int,
    parents: dict[ET.Element, ET.Element],
) -> bool:
    if index == 0:
        return True
    combinator = steps[index][0]
    target = steps[index - 1][1]
    parent = parents.get(el)
    if combinator == ">":
        return parent is not None and target.matches(parent) and _match_from(parent, steps, index - 1, parents)
    while parent is not None:
        if target.matches(parent) and _match_from(parent, steps, index - 1, parents):
            return True
        parent = parents.get(parent)
    return False


def select(root: ET.Element, selector: str) -> list[ET.Element]:
    """Elements under (and including) ``root`` matching a css selector.

    Supports type, ``#id`` and ``.class`` selectors joined by descendant or
    ``>`` combinators, and comma-separated groups. Raises ``SelectorError``
    for anything else.
    """
    groups = [_parse_complex(part.strip()) for part in selector.split(",")]
    parents = {child: parent for parent in root.iter() for child in parent}
    return [
        el
        for el in root.iter()
        if any(steps[-1][1].matches(el) and _match_from(el, steps, len(steps) - 1, parents) for steps in groups)
    ]


def _skip_at_rule(text: str, i: int) -> int:
    """Index just past the at-rule starting at ``i`` (statement or block)."""
    depth = 0
    while i < len(text):
        ch = text[i]
        if ch == ";" and depth == 0:
            return i + 1
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return i


def _strip_at_rules(text: str) -> str:
    out: list[str] = []
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "@" and depth == 0:
            i = _skip_at_rule(text, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(0, depth - 1)
        out.append(ch)
        i += 1
    return "".join(out)


def parse_rules(stylesheet: str) -> list[tuple[str, str]]:
    """Split a stylesheet into ``(selector, declarations)`` pairs.

    At-rules (``@media``, ``@supports``, ``@import`` ...) are dropped along
    with everything nested in them.
    """
    text = _strip_at_rules(_COMMENT_RE.sub("", stylesheet))
    return [(sel.strip(), body.strip()) for sel, body in _RULE_RE.findall(text) if sel.strip()]


def _class_rules(svg_id: str, classes: Mapping[str, Mapping]) -> tuple[str, str]:
    default_styles = ""
    embedded_styles = ""
    scope = f"#{svg_id.strip()}"
    for name, cls in classes.items():
        if name == "default":
            styles = cls.get("styles") or []
            if styles:
                for shape in ("rect", "polygon", "ellipse", "circle"):
                    default_styles += f"{scope} .node>{shape} {{ {'; '.join(styles)}; }}\n"
            for key, selector in (
                ("nodeLabelStyles", ".node text"),
                ("edgeLabelStyles", ".edgeLabel text"),
                ("clusterStyles", ".cluster rect"),
            ):
                extra = cls.get(key) or []
                if extra:
                    default_styles += f"{scope} {selector} {{ {'; '.join(extra)}; }}\n"
        else:
            styles = cls.get("styles") or []
            if styles:
                selectors = ", ".join(f"{scope} .{name}>{shape}" for shape in ("rect", "polygon", "ellipse", "circle"))
                embedded_styles += f"{selectors} {{ {'; '.join(styles)}; }}\n"
    return default_styles, embedded_styles


def clone_css_styles(svg: ET.Element, classes: Mapping[str, Mapping], stylesheets: list[str]) -> ET.Element | None:
    """Insert a ``<style>`` element holding every rule that applies to ``svg``.

    Returns the inserted element, or None when nothing applied.
    """
    used_styles = ""
    for sheet in stylesheets:
        for selector, body in parse_rules(sheet):
            try:
                matched = select(svg, selector)
            except SelectorError:
                logger.debug("Skipping unsupported selector %r", selector)
                continue
            if matched:
                used_styles += f"{selector} {{ {body} }}\n"

    default_styles, embedded_styles = _class_rules(svg.get("id", ""), classes)
    if not (used_styles or default_styles or embedded_styles):
        return None

    style = ET.Element("style", {"type": "text/css", "title": STYLE_TITLE})
    style.text = default_styles + used_styles + embedded_styles
    svg.insert(0, style)
    return style
