"""Gantt chart renderer: one bar per task on a linear time axis."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta

from mermaid_svg.config import AXIS_FORMATTER
from mermaid_svg.parsers.gantt import GanttChart, GanttParser, Task
from mermaid_svg.renderers.svg import CHAR_WIDTH_RATIO, fmt, set_size, sub
from mermaid_svg.surface import ScratchSurface

logger = logging.getLogger(__name__)

CHART_WIDTH = 1200
MAX_TICKS = 30


def format_tick(value: datetime, formatter: list) -> str:
    """Format an axis tick with the first formatter entry whose predicate holds."""
    for fmt_str, predicate in formatter:
        if predicate(value):
            return value.strftime(fmt_str)
    return value.strftime("%Y")


def _tick_step(span: timedelta) -> timedelta:
    for step in (
        timedelta(hours=1),
        timedelta(hours=6),
        timedelta(days=1),
        timedelta(weeks=1),
        timedelta(days=30),
        timedelta(days=365),
    ):
        if span / step <= MAX_TICKS:
            return step
    return timedelta(days=365 * ((span.days // (365 * MAX_TICKS)) + 1))


def axis_ticks(start: datetime, end: datetime) -> list[datetime]:
    """Evenly spaced tick instants covering ``[start, end]``."""
    if end <= start:
        return [start]
    step = _tick_step(end - start)
    if step >= timedelta(days=1):
        first = datetime(start.year, start.month, start.day)
    else:
        first = start.replace(minute=0, second=0, microsecond=0)
    if first < start:
        first += step
    ticks: list[datetime] = []
    current = first
    while current <= end:
        ticks.append(current)
        current += step
    return ticks


def task_class(task: Task, section_number: int) -> str:
    classes = "task"
    if task.active and task.crit:
        classes += " activeCrit"
    elif task.active:
        classes += " active"
    if task.done and task.crit:
        classes += " doneCrit"
    elif task.done:
        classes += " done"
    elif task.crit and not task.active:
        classes += " crit"
    return f"{classes}{section_number}"


class GanttRenderer:
    """Renders ``gantt`` definitions."""

    def __init__(self) -> None:
        self.conf: dict = {
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
        }

    def set_config(self, conf: dict) -> None:
        self.conf.update(conf)

    def draw(self, text: str, surface: ScratchSurface, is_dot: bool = False) -> None:
        chart = GanttParser().parse(text)
        conf = self.conf
        gap = conf["barHeight"] + conf["barGap"]
        width = CHART_WIDTH
        height = 2 * conf["topPadding"] + len(chart.tasks) * gap
        group = surface.group

        start, end = chart.start(), chart.end()
        if start is None or end is None:
            start = end = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        span = (end - start).total_seconds() or 1.0
        usable = width - 2 * conf["sidePadding"]

        def time_x(value: datetime) -> float:
            return conf["sidePadding"] + (value - start).total_seconds() / span * usable

        self._draw_sections(group, chart, width, gap)
        self._draw_grid(group, start, end, time_x, height)
        for i, task in enumerate(chart.tasks):
            self._draw_task(group, chart, task, i, gap, time_x, width)
        self._draw_section_titles(group, chart, gap)
        sub(
            group,
            "text",
            chart.title,
            x=width / 2,
            y=conf["titleTopMargin"],
            class_="titleText",
            text_anchor="middle",
        )
        set_size(surface.svg, width, height, True)
        logger.debug("Gantt %s: %d tasks in %d sections", surface.id, len(chart.tasks), len(chart.sections))

    def _section_number(self, chart: GanttChart, task: Task) -> int:
        index = chart.sections.index(task.section) if task.section in chart.sections else 0
        return index % max(1, int(self.conf["numberSectionStyles"]))

    def _draw_sections(self, group: ET.Element, chart: GanttChart, width: float, gap: float) -> None:
        g = sub(group, "g", class_="sections")
        for i, task in enumerate(chart.tasks):
            number = self._section_number(chart, task)
            sub(
                g,
                "rect",
                x=0,
                y=i * gap + self.conf["topPadding"] - 2,
                width=width,
                height=gap,
                class_=f"section section{number}",
            )

    def _draw_grid(self, group: ET.Element, start: datetime, end: datetime, time_x, height: float) -> None:
        conf = self.conf
        grid = sub(group, "g", class_="grid", transform=f"translate(0,{fmt(height - 50)})")
        line_top = -(height - 50 - conf["gridLineStartPadding"])
        for tick in axis_ticks(start, end):
            x = time_x(tick)
            g = sub(grid, "g", class_="tick", transform=f"translate({fmt(x)},0)")
            sub(g, "line", x1=0, y1=line_top, x2=0, y2=0, stroke="lightgrey")
            sub(
                g,
                "text",
                format_tick(tick, conf["axisFormatter"]),
                x=0,
                y=3,
                dy="1em",
                font_size=conf["fontSize"],
                font_family=conf["fontFamily"],
                text_anchor="middle",
            )

    def _draw_task(
        self,
        group: ET.Element,
        chart: GanttChart,
        task: Task,
        row: int,
        gap: float,
        time_x,
        width: float,
    ) -> None:
        conf = self.conf
        number = self._section_number(chart, task)
        x0 = time_x(task.start)
        x1 = time_x(task.end)
        y = row * gap + conf["topPadding"]
        sub(
            group,
            "rect",
            id=task.id,
            rx=3,
            ry=3,
            x=x0,
            y=y,
            width=max(x1 - x0, 0.0),
            height=conf["barHeight"],
            class_=task_class(task, number),
        )
        text_width = len(task.name) * conf["fontSize"] * CHAR_WIDTH_RATIO
        text_y = y + conf["barHeight"] / 2 + conf["fontSize"] / 2 - 2
        if text_width <= x1 - x0:
            sub(group, "text", task.name, x=(x0 + x1) / 2, y=text_y, font_size=conf["fontSize"], text_anchor="middle", class_=f"taskText taskText{number}")
        elif x1 + 5 + text_width > width:
            sub(group, "text", task.name, x=x0 - 5, y=text_y, font_size=conf["fontSize"], text_anchor="end", class_=f"taskTextOutsideLeft taskTextOutside{number}")
        else:
            sub(group, "text", task.name, x=x1 + 5, y=text_y, font_size=conf["fontSize"], class_=f"taskTextOutsideRight taskTextOutside{number}")

    def _draw_section_titles(self, group: ET.Element, chart: GanttChart, gap: float) -> None:
        conf = self.conf
        for section in chart.sections:
            rows = [i for i, task in enumerate(chart.tasks) if task.section == section]
            if not rows:
                continue
            number = chart.sections.index(section) % max(1, int(conf["numberSectionStyles"]))
            middle = (rows[0] + rows[-1] + 1) / 2 * gap + conf["topPadding"]
            sub(group, "text", section, x=10, y=middle, font_size=conf["fontSize"], class_=f"sectionTitle sectionTitle{number}")
