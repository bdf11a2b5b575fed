"""Sequence diagram renderer.

Actors are laid out left to right; signals stack downwards from the actor
boxes, each advancing a vertical cursor. Block markers (loop/alt/opt) open a
frame that is drawn when the matching end marker arrives.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from mermaid_svg.parsers.sequence import Actor, LineType, Placement, SequenceParser, Signal
from mermaid_svg.renderers.svg import add_arrowhead, add_crosshead, fmt, multiline_text, set_size, sub, text_size
from mermaid_svg.surface import ScratchSurface

logger = logging.getLogger(__name__)

FONT_SIZE = 14

_STARTS = {LineType.LOOP_START: "loop", LineType.ALT_START: "alt", LineType.OPT_START: "opt"}
_ENDS = (LineType.LOOP_END, LineType.ALT_END, LineType.OPT_END)


@dataclass
class _Frame:
    kind: str
    title: str
    start_y: float
    min_x: float | None = None
    max_x: float | None = None
    sections: list[tuple[float, str]] = field(default_factory=list)

    def cover(self, x0: float, x1: float) -> None:
        lo, hi = min(x0, x1), max(x0, x1)
        self.min_x = lo if self.min_x is None else min(self.min_x, lo)
        self.max_x = hi if self.max_x is None else max(self.max_x, hi)


class SequenceRenderer:
    """Renders ``sequenceDiagram`` definitions."""

    def __init__(self) -> None:
        self.conf: dict = {
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
            "bottomMarginAdj": 1,
            "useMaxWidth": True,
        }

    def set_config(self, conf: dict) -> None:
        self.conf.update(conf)

    def actor_center(self, index: int) -> float:
        return index * (self.conf["width"] + self.conf["actorMargin"]) + self.conf["width"] / 2

    def draw(self, text: str, surface: ScratchSurface, is_dot: bool = False) -> None:
        diagram = SequenceParser().parse(text)
        conf = self.conf
        add_arrowhead(surface.svg)
        add_crosshead(surface.svg)
        group = surface.group

        index = {actor_id: i for i, actor_id in enumerate(diagram.actors)}
        centers = {actor_id: self.actor_center(i) for actor_id, i in index.items()}
        for i, actor in enumerate(diagram.actors.values()):
            self._draw_actor(group, actor, i * (conf["width"] + conf["actorMargin"]), 0)

        cursor = float(conf["height"])
        frames: list[_Frame] = []
        for signal in diagram.signals:
            cursor = self._draw_signal(group, signal, centers, frames, cursor)

        if conf["mirrorActors"]:
            cursor += conf["boxMargin"] * 2
            for i, actor in enumerate(diagram.actors.values()):
                self._draw_actor(group, actor, i * (conf["width"] + conf["actorMargin"]), cursor)
            bottom = cursor + conf["height"]
            lifeline_end = cursor
        else:
            cursor += conf["boxMargin"]
            bottom = cursor
            lifeline_end = cursor

        for i, actor_id in enumerate(diagram.actors):
            line = ET.Element(
                "line",
                {
                    "id": f"actor{i}",
                    "x1": fmt(centers[actor_id]),
                    "y1": fmt(conf["height"]),
                    "x2": fmt(centers[actor_id]),
                    "y2": fmt(lifeline_end),
                    "class": "actor-line",
                    "stroke-width": "0.5px",
                    "stroke": "#999",
                },
            )
            group.insert(0, line)

        width = max(1, len(diagram.actors)) * (conf["width"] + conf["actorMargin"]) - conf["actorMargin"]
        min_y = -conf["diagramMarginY"]
        if diagram.title:
            min_y -= 2 * FONT_SIZE
            sub(group, "text", diagram.title, x=width / 2, y=min_y + 1.5 * FONT_SIZE, class_="titleText", text_anchor="middle")
        height = bottom - min_y + conf["diagramMarginY"] + conf["bottomMarginAdj"]
        set_size(
            surface.svg,
            width + 2 * conf["diagramMarginX"],
            height,
            bool(conf["useMaxWidth"]),
            -conf["diagramMarginX"],
            min_y,
        )
        logger.debug("Sequence %s: %d actors, %d signals", surface.id, len(diagram.actors), len(diagram.signals))

    def _draw_actor(self, group: ET.Element, actor: Actor, x: float, y: float) -> None:
        conf = self.conf
        g = sub(group, "g")
        sub(g, "rect", x=x, y=y, width=conf["width"], height=conf["height"], rx=3, ry=3, class_="actor", fill="#eaeaea", stroke="#666")
        _, text_h = text_size(actor.description, FONT_SIZE)
        multiline_text(
            g,
            actor.description,
            x + conf["width"] / 2,
            y + conf["height"] / 2 - text_h / 2 + FONT_SIZE,
            FONT_SIZE,
            class_="actor",
            text_anchor="middle",
        )

    def _draw_signal(
        self,
        group: ET.Element,
        signal: Signal,
        centers: dict[str, float],
        frames: list[_Frame],
        cursor: float,
    ) -> float:
        conf = self.conf
        if signal.type in _STARTS:
            cursor += conf["boxMargin"]
            frames.append(_Frame(kind=_STARTS[signal.type], title=signal.text, start_y=cursor))
            return cursor + conf["boxMargin"] + conf["boxTextMargin"] + FONT_SIZE
        if signal.type == LineType.ALT_ELSE:
            cursor += conf["boxMargin"]
            frames[-1].sections.append((cursor, signal.text))
            return cursor + conf["boxMargin"] + conf["boxTextMargin"] + FONT_SIZE
        if signal.type in _ENDS:
            cursor += conf["boxMargin"]
            frame = frames.pop()
            self._draw_frame(group, frame, cursor, centers)
            if frames and frame.min_x is not None and frame.max_x is not None:
                frames[-1].cover(frame.min_x - conf["boxMargin"], frame.max_x + conf["boxMargin"])
            return cursor
        if signal.type == LineType.NOTE:
            return self._draw_note(group, signal, centers, frames, cursor)
        return self._draw_message(group, signal, centers, frames, cursor)

    def _draw_frame(self, group: ET.Element, frame: _Frame, end_y: float, centers: dict[str, float]) -> None:
        conf = self.conf
        if frame.min_x is None or frame.max_x is None:
            xs = list(centers.values()) or [conf["width"] / 2]
            frame.cover(min(xs) - conf["width"] / 2, max(xs) + conf["width"] / 2)
        x0 = frame.min_x - conf["boxMargin"]
        x1 = frame.max_x + conf["boxMargin"]
        g = sub(group, "g", class_=f"loop {frame.kind}")
        sub(g, "rect", x=x0, y=frame.start_y, width=x1 - x0, height=end_y - frame.start_y, class_="loopLine", fill="none", stroke="#000")
        sub(g, "text", frame.kind, x=x0 + conf["boxTextMargin"], y=frame.start_y + FONT_SIZE + conf["boxTextMargin"], class_="labelText")
        if frame.title:
            sub(g, "text", f"[{frame.title}]", x=(x0 + x1) / 2, y=frame.start_y + FONT_SIZE + conf["boxTextMargin"], class_="loopText", text_anchor="middle")
        for y, title in frame.sections:
            sub(g, "line", x1=x0, y1=y, x2=x1, y2=y, class_="loopLine", stroke_dasharray="3, 3", stroke="#000")
            if title:
                sub(g, "text", f"[{title}]", x=(x0 + x1) / 2, y=y + FONT_SIZE + conf["boxTextMargin"], class_="loopText", text_anchor="middle")

    def _draw_note(
        self,
        group: ET.Element,
        signal: Signal,
        centers: dict[str, float],
        frames: list[_Frame],
        cursor: float,
    ) -> float:
        conf = self.conf
        cursor += conf["noteMargin"]
        first = centers[signal.from_id]
        second = centers[signal.to_id or signal.from_id]
        width = conf["width"]
        if signal.placement == Placement.LEFT_OF:
            x = first - conf["actorMargin"] / 2 - width
        elif signal.placement == Placement.RIGHT_OF:
            x = first + conf["actorMargin"] / 2
        elif first != second:
            x = min(first, second) - conf["noteMargin"] - conf["actorMargin"] / 2
            width = abs(second - first) + 2 * conf["noteMargin"] + conf["actorMargin"]
        else:
            x = first - width / 2
        _, text_h = text_size(signal.text, FONT_SIZE)
        height = text_h + 2 * conf["noteMargin"]
        g = sub(group, "g")
        sub(g, "rect", x=x, y=cursor, width=width, height=height, class_="note", fill="#EDF2AE", stroke="#666")
        multiline_text(g, signal.text, x + width / 2, cursor + conf["noteMargin"] + FONT_SIZE, FONT_SIZE, class_="noteText", text_anchor="middle")
        for frame in frames:
            frame.cover(x, x + width)
        return cursor + height

    def _draw_message(
        self,
        group: ET.Element,
        signal: Signal,
        centers: dict[str, float],
        frames: list[_Frame],
        cursor: float,
    ) -> float:
        conf = self.conf
        cursor += conf["messageMargin"]
        start = centers[signal.from_id]
        stop = centers[signal.to_id]
        g = sub(group, "g")
        line_class = "messageLine1" if signal.type.is_dotted() else "messageLine0"
        dash = "3, 3" if signal.type.is_dotted() else None
        if signal.type in (LineType.SOLID, LineType.DOTTED):
            marker = "url(#arrowhead)"
        elif signal.type in (LineType.SOLID_CROSS, LineType.DOTTED_CROSS):
            marker = "url(#crosshead)"
        else:
            marker = None

        if start == stop:
            loop = conf["width"] / 2
            d = f"M {start},{cursor} C {start + loop},{cursor - 10} {start + loop},{cursor + 30} {start},{cursor + 20}"
            sub(g, "path", d=d, class_=line_class, stroke="black", fill="none", stroke_dasharray=dash, marker_end=marker)
            sub(g, "text", signal.text, x=start + loop / 2, y=cursor - 7, class_="messageText", text_anchor="middle")
            for frame in frames:
                frame.cover(start, start + loop)
            return cursor + 20
        sub(g, "text", signal.text, x=(start + stop) / 2, y=cursor - 7, class_="messageText", text_anchor="middle")
        sub(
            g,
            "line",
            x1=start,
            y1=cursor,
            x2=stop,
            y2=cursor,
            class_=line_class,
            stroke_width=2,
            stroke="black",
            stroke_dasharray=dash,
            marker_end=marker,
        )
        for frame in frames:
            frame.cover(start, stop)
        return cursor
