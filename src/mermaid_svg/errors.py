"""Exception types raised by parsers and renderers."""

from __future__ import annotations


class MermaidError(Exception):
    """Base class for all mermaid-svg errors."""


class ParseError(MermaidError, ValueError):
    """A diagram definition does not match its grammar.

    ``context`` mirrors a parser error hash: the offending ``text``, the
    1-based ``line``, the ``token`` that was found and what was ``expected``.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.context: dict = context or {}

    @classmethod
    def at(cls, src: str, pos: int, expected: str) -> ParseError:
        """Build an error for position ``pos`` in ``src``."""
        line_no = src.count("\n", 0, pos) + 1
        line_start = src.rfind("\n", 0, pos) + 1
        line_end = src.find("\n", pos)
        if line_end == -1:
            line_end = len(src)
        line = src[line_start:line_end]
        token = src[pos:line_end].strip() or "EOF"
        message = (
            f"Parse error on line {line_no}:\n{line}\n{' ' * (pos - line_start)}^\n"
            f"Expecting {expected}, got '{token}'"
        )
        return cls(message, {"text": line, "line": line_no, "token": token, "expected": expected})


class RenderError(MermaidError):
    """A renderer failed while drawing into its scratch surface."""
