"""Info diagram renderer: prints the package version."""

from __future__ import annotations

from mermaid_svg.parsers.info import InfoParser
from mermaid_svg.renderers.svg import set_size, sub
from mermaid_svg.surface import ScratchSurface


class InfoRenderer:
    """Renders ``info`` definitions; takes no configuration."""

    def __init__(self, version: str) -> None:
        self.version = version

    def set_config(self, conf: dict) -> None:
        pass

    def draw(self, text: str, surface: ScratchSurface, is_dot: bool = False) -> None:
        diagram = InfoParser().parse(text)
        sub(surface.group, "text", f"v {self.version}", x=100, y=40, class_="version", font_size="32px", style="text-anchor: middle;")
        if diagram.show_info:
            sub(surface.group, "text", "mermaid-svg", x=100, y=80, class_="info", style="text-anchor: middle;")
        set_size(surface.svg, 400, 100, False)
