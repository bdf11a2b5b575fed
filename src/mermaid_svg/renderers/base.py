"""Base renderer protocols."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from mermaid_svg.surface import ScratchSurface

BindFunctions = Callable[[ET.Element], list[str]]


class Renderer(Protocol):
    """Protocol that all diagram renderers must implement.

    ``draw`` parses ``text`` itself, draws into ``surface`` and may return a
    function that binds interactions (click handlers, tooltips) onto the
    element the caller eventually inserts the markup into.
    """

    def set_config(self, conf: dict) -> None:
        ...

    def draw(self, text: str, surface: ScratchSurface, is_dot: bool = False) -> BindFunctions | None:
        ...


@runtime_checkable
class ClassProvider(Protocol):
    """Renderers that can report the css classes a definition uses."""

    def get_classes(self, text: str, is_dot: bool = False) -> dict[str, dict]:
        ...
