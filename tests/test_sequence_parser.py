"""Tests for mermaid_svg.parsers.sequence."""

import pytest

from mermaid_svg.errors import ParseError
from mermaid_svg.parsers.sequence import LineType, Placement, SequenceParser


def parse(src: str):
    return SequenceParser().parse(src)


def test_messages():
    diagram = parse("sequenceDiagram\n    Alice->>John: Hello John\n    John-->>Alice: Great!\n")
    assert list(diagram.actors) == ["Alice", "John"]
    assert [s.type for s in diagram.signals] == [LineType.SOLID, LineType.DOTTED]
    assert diagram.signals[0].text == "Hello John"
    assert diagram.signals[1].from_id == "John"
    assert diagram.signals[1].to_id == "Alice"


def test_arrow_kinds():
    diagram = parse("sequenceDiagram\nA->B: a\nA-->B: b\nA-xB: c\nA--xB: d\n")
    assert [s.type for s in diagram.signals] == [
        LineType.SOLID_OPEN,
        LineType.DOTTED_OPEN,
        LineType.SOLID_CROSS,
        LineType.DOTTED_CROSS,
    ]


def test_participant_alias():
    diagram = parse("sequenceDiagram\n    participant A as Alice\n    A->>B: hi\n")
    assert diagram.actors["A"].description == "Alice"
    assert diagram.actors["B"].description == "B"


def test_notes():
    diagram = parse("sequenceDiagram\n    Note right of John: Rational\n    Note over Alice,John: Both\n")
    first, second = diagram.notes()
    assert first.placement == Placement.RIGHT_OF
    assert first.text == "Rational"
    assert second.placement == Placement.OVER
    assert (second.from_id, second.to_id) == ("Alice", "John")


def test_loop_block():
    diagram = parse("sequenceDiagram\n    loop Every minute\n        John-->Alice: Great!\n    end\n")
    assert [s.type for s in diagram.signals] == [LineType.LOOP_START, LineType.DOTTED_OPEN, LineType.LOOP_END]
    assert diagram.signals[0].text == "Every minute"


def test_alt_else_block():
    src = "sequenceDiagram\nalt is sick\nBob->>Alice: Not so good\nelse is well\nBob->>Alice: Fine\nend\n"
    diagram = parse(src)
    assert [s.type for s in diagram.signals] == [
        LineType.ALT_START,
        LineType.SOLID,
        LineType.ALT_ELSE,
        LineType.SOLID,
        LineType.ALT_END,
    ]


def test_title_and_comments():
    diagram = parse("%% leading comment\nsequenceDiagram\n    title Greetings\n    A->>B: hi\n")
    assert diagram.title == "Greetings"


class TestErrors:
    def test_end_without_block(self):
        with pytest.raises(ParseError):
            parse("sequenceDiagram\n    end\n")

    def test_missing_end(self):
        with pytest.raises(ParseError):
            parse("sequenceDiagram\n    loop forever\n    A->>B: hi\n")

    def test_unknown_statement(self):
        with pytest.raises(ParseError) as excinfo:
            parse("sequenceDiagram\n    Alice => John\n")
        assert excinfo.value.context["line"] == 2

    def test_missing_header(self):
        with pytest.raises(ParseError):
            parse("Alice->>John: Hello\n")
