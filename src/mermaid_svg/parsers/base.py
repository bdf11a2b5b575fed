"""Base parser protocol."""

from __future__ import annotations

from typing import Protocol


class Parser(Protocol):
    """Protocol that all diagram parsers must implement.

    ``parse`` returns a fresh model for every call and raises
    ``mermaid_svg.errors.ParseError`` when the text does not match the grammar.
    """

    def parse(self, src: str) -> object:
        ...
