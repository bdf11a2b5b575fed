"""Gantt chart parser.

    gantt
        title A Gantt Diagram
        dateFormat YYYY-MM-DD
        section Section
        A task          :a1, 2014-01-01, 30d
        Another task    :after a1, 20d
        Follow up       :crit, 12d

Task data is ``[done|active|crit,]* [id,] [start,] end``. A missing start
means "right after the previous task"; ``after <id>`` starts at the end of
another task; the end is either a date or a duration (``ms``, ``s``, ``m``,
``h``, ``d``, ``w``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from mermaid_svg.errors import ParseError

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"

# moment.js style tokens, longest first
_FORMAT_TOKENS: list[tuple[str, str]] = [
    ("YYYY", "%Y"),
    ("YY", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("HH", "%H"),
    ("mm", "%M"),
    ("ss", "%S"),
]

_DURATION_RE = re.compile(r"(?P<amount>\d+(?:\.\d+)?)(?P<unit>ms|s|m|h|d|w)")
_UNITS: dict[str, str] = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}
_TAGS = ("done", "active", "crit")
_KEYWORD_RE = re.compile(r"(?P<keyword>title|dateFormat|section)(?:[ \t]+(?P<value>.*))?$")
_TASK_RE = re.compile(r"(?P<name>[^:#\n]+?)[ \t]*:(?P<data>[^\n]*)$")


def strptime_format(date_format: str) -> str:
    """Translate a moment.js date format (``YYYY-MM-DD``) into strptime form."""
    out: list[str] = []
    i = 0
    while i < len(date_format):
        for token, directive in _FORMAT_TOKENS:
            if date_format.startswith(token, i):
                out.append(directive)
                i += len(token)
                break
        else:
            ch = date_format[i]
            out.append("%%" if ch == "%" else ch)
            i += 1
    return "".join(out)


def parse_duration(text: str) -> timedelta | None:
    m = _DURATION_RE.fullmatch(text.strip())
    if m is None:
        return None
    return timedelta(**{_UNITS[m.group("unit")]: float(m.group("amount"))})


@dataclass
class Task:
    id: str
    name: str
    section: str
    start: datetime
    end: datetime
    done: bool = False
    active: bool = False
    crit: bool = False
    order: int = 0


@dataclass
class GanttChart:
    title: str = ""
    date_format: str = DEFAULT_DATE_FORMAT
    sections: list[str] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def start(self) -> datetime | None:
        return min((t.start for t in self.tasks), default=None)

    def end(self) -> datetime | None:
        return max((t.end for t in self.tasks), default=None)


class _TaskBuilder:
    """Turns the ``:data`` part of a task line into a Task."""

    def __init__(self, chart: GanttChart, src: str) -> None:
        self.chart = chart
        self.src = src

    def parse_date(self, text: str, pos: int) -> datetime:
        try:
            return datetime.strptime(text.strip(), strptime_format(self.chart.date_format))
        except ValueError:
            raise ParseError.at(self.src, pos, f"date in format {self.chart.date_format}") from None

    def start_date(self, text: str, pos: int) -> datetime:
        text = text.strip()
        if text.lower().startswith("after "):
            ref = text[len("after ") :].strip()
            other = self.chart.find_task(ref)
            if other is None:
                raise ParseError.at(self.src, pos, f"known task id, got '{ref}'")
            return other.end
        return self.parse_date(text, pos)

    def end_date(self, text: str, start: datetime, pos: int) -> datetime:
        duration = parse_duration(text)
        if duration is not None:
            return start + duration
        return self.parse_date(text, pos)

    def build(self, name: str, data: str, section: str, pos: int) -> Task:
        items = [item.strip() for item in data.split(",")]
        flags = {tag: False for tag in _TAGS}
        while items and items[0].lower() in _TAGS:
            flags[items.pop(0).lower()] = True

        order = len(self.chart.tasks)
        task_id = f"task{order + 1}"
        if len(items) == 1:
            previous = self.chart.tasks[-1] if self.chart.tasks else None
            if previous is None:
                raise ParseError.at(self.src, pos, "start date for the first task")
            start = previous.end
            end_text = items[0]
        elif len(items) == 2:
            start = self.start_date(items[0], pos)
            end_text = items[1]
        elif len(items) == 3:
            task_id = items[0]
            start = self.start_date(items[1], pos)
            end_text = items[2]
        else:
            raise ParseError.at(self.src, pos, "'[id,] [start,] end'")

        if not end_text:
            raise ParseError.at(self.src, pos, "end date or duration")
        end = self.end_date(end_text, start, pos)
        if end < start:
            raise ParseError.at(self.src, pos, "end after start")
        return Task(
            id=task_id,
            name=name,
            section=section,
            start=start,
            end=end,
            order=order,
            **flags,
        )


class GanttParser:
    """Gantt chart parser."""

    def parse(self, src: str) -> GanttChart:
        chart = GanttChart()
        builder = _TaskBuilder(chart, src)
        section = ""
        seen_header = False
        offset = 0
        for raw in src.splitlines(keepends=True):
            pos = offset + len(raw) - len(raw.lstrip())
            offset += len(raw)
            line = raw.strip()
            if not line or line.startswith("%%"):
                continue
            if not seen_header:
                if line.lower() != "gantt":
                    raise ParseError.at(src, pos, "'gantt'")
                seen_header = True
                continue

            m = _KEYWORD_RE.match(line)
            if m:
                value = (m.group("value") or "").strip()
                keyword = m.group("keyword")
                if not value:
                    raise ParseError.at(src, pos, f"value after '{keyword}'")
                if keyword == "title":
                    chart.title = value
                elif keyword == "dateFormat":
                    chart.date_format = value
                else:
                    section = value
                    chart.sections.append(section)
                continue

            m = _TASK_RE.match(line)
            if m is None:
                raise ParseError.at(src, pos, "task, section, title or dateFormat")
            chart.tasks.append(builder.build(m.group("name").strip(), m.group("data"), section, pos))

        if not seen_header:
            raise ParseError.at(src, len(src), "'gantt'")
        return chart
