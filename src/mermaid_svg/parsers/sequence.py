"""Sequence diagram parser.

Line oriented: after the ``sequenceDiagram`` header every significant line is
one statement (participant, message, note, block keyword or title).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto

from mermaid_svg.errors import ParseError


class LineType(Enum):
    SOLID = auto()  # ->>
    DOTTED = auto()  # -->>
    SOLID_CROSS = auto()  # -x
    DOTTED_CROSS = auto()  # --x
    SOLID_OPEN = auto()  # ->
    DOTTED_OPEN = auto()  # -->
    NOTE = auto()
    LOOP_START = auto()
    LOOP_END = auto()
    ALT_START = auto()
    ALT_ELSE = auto()
    ALT_END = auto()
    OPT_START = auto()
    OPT_END = auto()

    def is_dotted(self) -> bool:
        return self in (LineType.DOTTED, LineType.DOTTED_CROSS, LineType.DOTTED_OPEN)


class Placement(Enum):
    LEFT_OF = auto()
    RIGHT_OF = auto()
    OVER = auto()


_ARROWS: dict[str, LineType] = {
    "-->>": LineType.DOTTED,
    "->>": LineType.SOLID,
    "--x": LineType.DOTTED_CROSS,
    "-x": LineType.SOLID_CROSS,
    "-->": LineType.DOTTED_OPEN,
    "->": LineType.SOLID_OPEN,
}

_ACTOR = r"[A-Za-z0-9_][^\s\-+>:,;]*"
_MESSAGE_RE = re.compile(
    rf"(?P<from>{_ACTOR})[ \t]*(?P<arrow>-->>|->>|--x|-x|-->|->)[ \t]*(?P<to>{_ACTOR})[ \t]*:(?P<text>.*)"
)
_PARTICIPANT_RE = re.compile(rf"participant[ \t]+(?P<id>{_ACTOR})(?:[ \t]+as[ \t]+(?P<desc>.+))?", re.IGNORECASE)
_NOTE_RE = re.compile(
    rf"note[ \t]+(?P<placement>left[ \t]+of|right[ \t]+of|over)[ \t]+"
    rf"(?P<first>{_ACTOR})(?:[ \t]*,[ \t]*(?P<second>{_ACTOR}))?[ \t]*:(?P<text>.*)",
    re.IGNORECASE,
)
_BLOCK_RE = re.compile(r"(?P<keyword>loop|alt|else|opt|end)(?![A-Za-z0-9_])[ \t]*(?P<text>.*)", re.IGNORECASE)
_TITLE_RE = re.compile(r"title[ \t]+(?P<text>.+)", re.IGNORECASE)
_HEADER_RE = re.compile(r"sequenceDiagram(?![A-Za-z0-9_])", re.IGNORECASE)

_BLOCK_START = {"loop": LineType.LOOP_START, "alt": LineType.ALT_START, "opt": LineType.OPT_START}
_BLOCK_END = {"loop": LineType.LOOP_END, "alt": LineType.ALT_END, "opt": LineType.OPT_END}


@dataclass
class Actor:
    id: str
    description: str


@dataclass
class Signal:
    """One message, note or block marker in diagram order."""

    type: LineType
    text: str = ""
    from_id: str | None = None
    to_id: str | None = None
    placement: Placement | None = None


@dataclass
class SequenceDiagram:
    title: str | None = None
    actors: dict[str, Actor] = field(default_factory=dict)
    signals: list[Signal] = field(default_factory=list)

    def add_actor(self, actor_id: str, description: str | None = None) -> None:
        existing = self.actors.get(actor_id)
        if existing is None:
            self.actors[actor_id] = Actor(actor_id, description or actor_id)
        elif description:
            existing.description = description

    def messages(self) -> list[Signal]:
        return [s for s in self.signals if s.from_id is not None and s.type != LineType.NOTE]

    def notes(self) -> list[Signal]:
        return [s for s in self.signals if s.type == LineType.NOTE]


def _unescape(text: str) -> str:
    return text.strip().replace("<br>", "\n").replace("<br/>", "\n")


class SequenceParser:
    """Sequence diagram parser."""

    def parse(self, src: str) -> SequenceDiagram:
        diagram = SequenceDiagram()
        open_blocks: list[str] = []
        seen_header = False
        offset = 0
        for raw in src.splitlines(keepends=True):
            line_pos = offset
            offset += len(raw)
            line = raw.strip()
            if not line or line.startswith("%%"):
                continue
            stmt = line.rstrip(";").strip()
            pos = line_pos + len(raw) - len(raw.lstrip())
            if not seen_header:
                if not _HEADER_RE.fullmatch(stmt):
                    raise ParseError.at(src, pos, "'sequenceDiagram'")
                seen_header = True
                continue
            self._parse_statement(diagram, stmt, open_blocks, src, pos)

        if not seen_header:
            raise ParseError.at(src, len(src), "'sequenceDiagram'")
        if open_blocks:
            raise ParseError.at(src, len(src), f"'end' closing '{open_blocks[-1]}'")
        return diagram

    def _parse_statement(
        self,
        diagram: SequenceDiagram,
        stmt: str,
        open_blocks: list[str],
        src: str,
        pos: int,
    ) -> None:
        m = _PARTICIPANT_RE.fullmatch(stmt)
        if m:
            diagram.add_actor(m.group("id"), m.group("desc") and m.group("desc").strip())
            return

        m = _NOTE_RE.fullmatch(stmt)
        if m:
            placement_text = " ".join(m.group("placement").lower().split())
            placement = {
                "left of": Placement.LEFT_OF,
                "right of": Placement.RIGHT_OF,
                "over": Placement.OVER,
            }[placement_text]
            first, second = m.group("first"), m.group("second")
            diagram.add_actor(first)
            if second:
                diagram.add_actor(second)
            diagram.signals.append(
                Signal(
                    type=LineType.NOTE,
                    text=_unescape(m.group("text")),
                    from_id=first,
                    to_id=second or first,
                    placement=placement,
                )
            )
            return

        m = _BLOCK_RE.fullmatch(stmt)
        if m:
            keyword = m.group("keyword").lower()
            text = _unescape(m.group("text"))
            if keyword in _BLOCK_START:
                open_blocks.append(keyword)
                diagram.signals.append(Signal(type=_BLOCK_START[keyword], text=text))
            elif keyword == "else":
                if not open_blocks or open_blocks[-1] != "alt":
                    raise ParseError.at(src, pos, "'else' inside 'alt'")
                diagram.signals.append(Signal(type=LineType.ALT_ELSE, text=text))
            else:
                if not open_blocks:
                    raise ParseError.at(src, pos, "block to close")
                diagram.signals.append(Signal(type=_BLOCK_END[open_blocks.pop()]))
            return

        m = _MESSAGE_RE.fullmatch(stmt)
        if m:
            diagram.add_actor(m.group("from"))
            diagram.add_actor(m.group("to"))
            diagram.signals.append(
                Signal(
                    type=_ARROWS[m.group("arrow")],
                    text=_unescape(m.group("text")),
                    from_id=m.group("from"),
                    to_id=m.group("to"),
                )
            )
            return

        m = _TITLE_RE.fullmatch(stmt)
        if m:
            diagram.title = m.group("text").strip()
            return

        raise ParseError.at(src, pos, "participant, message, note or block")
