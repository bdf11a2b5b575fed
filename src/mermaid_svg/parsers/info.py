"""Info diagram parser: ``info`` optionally followed by ``showInfo``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from mermaid_svg.errors import ParseError

_INFO_RE = re.compile(r"\s*(?:%%[^\n]*\n\s*)*info(?P<show>[ \t\n]+showInfo)?\s*", re.IGNORECASE)


@dataclass
class InfoDiagram:
    show_info: bool = False


class InfoParser:
    """Info diagram parser."""

    def parse(self, src: str) -> InfoDiagram:
        m = _INFO_RE.fullmatch(src)
        if m is None:
            raise ParseError.at(src, len(src) - len(src.lstrip()), "'info [showInfo]'")
        return InfoDiagram(show_info=m.group("show") is not None)
