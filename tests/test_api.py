"""Tests for mermaid_svg.api: render orchestration end to end."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

import pytest

import mermaid_svg
import mermaid_svg.api
from mermaid_svg import diagrams
from mermaid_svg.api import MermaidAPI, rewrite_fragment_urls
from mermaid_svg.detect import DiagramType
from mermaid_svg.diagrams import DiagramDefinition
from mermaid_svg.errors import ParseError, RenderError
from mermaid_svg.parsers.info import InfoParser
from mermaid_svg.surface import SVG_NS, Document, scratch_surface

FLOWCHART = "graph TB\na-->b"
SEQUENCE = "sequenceDiagram\n    Alice->>John: Hello John\n    John-->>Alice: Great!\n"
GANTT = """gantt
    title A Gantt Diagram
    dateFormat YYYY-MM-DD
    section Section
    A task           :a1, 2014-01-01, 30d
    Another task     :after a1, 20d
    section Another
    Task in sec      :2014-01-12, 12d
    another task     : 24d
"""

# ─── Helpers ──────────────────────────────────────────────────────────────────


class Recorder:
    """Collects render callbacks and parse errors."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []
        self.errors: list[tuple[Exception, dict]] = []

    def callback(self, svg: str, bind_functions) -> None:
        self.calls.append((svg, bind_functions))

    def on_error(self, err: Exception, context: dict) -> None:
        self.errors.append((err, context))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def api(recorder: Recorder) -> MermaidAPI:
    return MermaidAPI(document=Document(), parse_error_handler=recorder.on_error)


def render_svg(api: MermaidAPI, recorder: Recorder, text: str, id: str = "g1") -> ET.Element:
    api.render(id, text, recorder.callback)
    assert recorder.errors == []
    svg, _ = recorder.calls[-1]
    return ET.fromstring(svg)


def q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


class BrokenRenderer:
    def set_config(self, conf: dict) -> None:
        pass

    def draw(self, text, surface, is_dot=False):
        raise RuntimeError("renderer exploded")


# ─── Parse ────────────────────────────────────────────────────────────────────


class TestParse:
    def test_valid(self, api):
        assert api.parse(FLOWCHART) is True

    def test_dangling_edge(self, api, recorder):
        assert api.parse("graph TB\na--") is False
        err, context = recorder.errors[0]
        assert isinstance(err, ParseError)
        assert context["line"] == 2

    def test_unrecognized_type(self, api, recorder):
        assert api.parse("pie title Pets") is False
        assert isinstance(recorder.errors[0][0], ParseError)

    def test_every_diagram_type(self, api):
        assert api.parse(SEQUENCE)
        assert api.parse(GANTT)
        assert api.parse("digraph { a -> b }")
        assert api.parse("info")

    def test_successive_parses_independent(self):
        first = diagrams.parse("graph TB\na-->b", DiagramType.FLOWCHART)
        second = diagrams.parse("graph TB\nc-->d", DiagramType.FLOWCHART)
        assert [n.id for n in first.model.nodes] == ["a", "b"]
        assert [n.id for n in second.model.nodes] == ["c", "d"]

    def test_parse_outcome_never_raises(self):
        outcome = diagrams.parse("sequenceDiagram\n    end\n", DiagramType.SEQUENCE)
        assert not outcome.ok
        assert outcome.model is None
        assert isinstance(outcome.error, ParseError)

    def test_without_handler_logs(self, caplog):
        api = MermaidAPI(document=Document())
        with caplog.at_level(logging.DEBUG, logger="mermaid_svg.api"):
            assert api.parse("graph TB\na--") is False
        assert "Syntax error" in caplog.text


# ─── Render ───────────────────────────────────────────────────────────────────


class TestRender:
    def test_flowchart(self, api, recorder):
        svg = render_svg(api, recorder, FLOWCHART)
        assert svg.tag == q("svg")
        assert svg.get("id") == "g1"
        assert {g.get("id") for g in svg.iter(q("g")) if "node" in (g.get("class") or "").split()} == {"a", "b"}

    def test_surface_removed(self, api, recorder):
        api.render("g1", FLOWCHART, recorder.callback)
        assert api.document.get_element_by_id("dg1") is None
        assert len(api.document.body) == 0

    def test_callback_sees_live_surface(self, api):
        host = ET.SubElement(api.document.body, "div", {"id": "host"})
        seen = []

        def callback(svg, bind_functions):
            div = api.document.get_element_by_id("dg1")
            seen.append(api.document.parent_of(div))

        api.render("g1", FLOWCHART, callback, container="#host")
        assert seen == [host]
        assert len(host) == 0

    def test_class_selector_container(self, api):
        host = ET.SubElement(api.document.body, "div", {"class": "host"})
        sizes = []

        def callback(svg, bind_functions):
            sizes.append(len(host))

        api.render("g1", FLOWCHART, callback, container=".host")
        assert sizes == [1]
        assert len(host) == 0

    def test_sequence(self, api, recorder):
        svg = render_svg(api, recorder, SEQUENCE)
        actors = [r for r in svg.iter(q("rect")) if r.get("class") == "actor"]
        assert len(actors) == 4
        assert recorder.calls[-1][1] is None

    def test_gantt(self, api, recorder):
        svg = render_svg(api, recorder, GANTT)
        bars = [r for r in svg.iter(q("rect")) if (r.get("class") or "").startswith("task")]
        assert [r.get("id") for r in bars] == ["a1", "task2", "task3", "task4"]

    def test_dot(self, api, recorder):
        svg = render_svg(api, recorder, "digraph { a -> b -> c }")
        paths = [p for p in svg.iter(q("path")) if p.get("class") == "path"]
        assert len(paths) == 2

    def test_info(self, api, recorder):
        svg = render_svg(api, recorder, "info")
        texts = [t.text for t in svg.iter(q("text"))]
        assert f"v {mermaid_svg.__version__}" in texts

    def test_unrecognized_type(self, api, recorder, monkeypatch):
        entered = []

        def spy_surface(*args, **kwargs):
            entered.append(args)
            return scratch_surface(*args, **kwargs)

        monkeypatch.setattr(diagrams, "DIAGRAMS", {})
        monkeypatch.setattr(mermaid_svg.api, "scratch_surface", spy_surface)
        api.render("g1", "pie title Pets", recorder.callback)
        assert recorder.calls == [("", None)]
        assert entered == []
        assert len(api.document.body) == 0

    def test_known_type_enters_surface(self, api, recorder, monkeypatch):
        entered = []

        def spy_surface(*args, **kwargs):
            entered.append(args[1])
            return scratch_surface(*args, **kwargs)

        monkeypatch.setattr(mermaid_svg.api, "scratch_surface", spy_surface)
        api.render("g1", FLOWCHART, recorder.callback)
        assert entered == ["g1"]

    def test_parse_error(self, api, recorder):
        api.render("g1", "graph TB\na--", recorder.callback)
        assert recorder.calls == []
        assert isinstance(recorder.errors[0][0], ParseError)
        assert api.document.get_element_by_id("dg1") is None

    def test_renderer_failure(self, api, recorder, monkeypatch, caplog):
        broken = DiagramDefinition(DiagramType.INFO, InfoParser, BrokenRenderer, None)
        monkeypatch.setitem(diagrams.DIAGRAMS, DiagramType.INFO, broken)
        api.render("g1", "info", recorder.callback)
        assert recorder.calls == []
        err, _ = recorder.errors[0]
        assert isinstance(err, RenderError)
        assert isinstance(err.__cause__, RuntimeError)
        assert api.document.get_element_by_id("dg1") is None
        assert "Renderer for info failed" in caplog.text

    def test_no_callback(self, api, caplog):
        with caplog.at_level(logging.WARNING, logger="mermaid_svg.api"):
            api.render("g1", FLOWCHART)
        assert "No callback" in caplog.text
        assert len(api.document.body) == 0

    def test_headless(self, recorder):
        api = MermaidAPI(document=None, parse_error_handler=recorder.on_error)
        api.render("g1", FLOWCHART, recorder.callback)
        assert recorder.calls == []
        assert recorder.errors == []


# ─── Output packaging ─────────────────────────────────────────────────────────


class TestPackaging:
    def test_rewrite_fragment_urls(self):
        markup = '<path marker-end="url(#arrowhead)"/><path fill="url(#grad)"/>'
        out = rewrite_fragment_urls(markup, "http://localhost/page")
        assert out == '<path marker-end="url(http://localhost/page#arrowhead)"/><path fill="url(http://localhost/page#grad)"/>'

    def test_markers_qualified_with_document_url(self, recorder):
        api = MermaidAPI(document=Document(location="https://example.com/docs/page.html?x=1#top"))
        api.render("g1", SEQUENCE, recorder.callback)
        svg = recorder.calls[0][0]
        assert "url(#" not in svg
        assert "url(https://example.com/docs/page.html#arrowhead)" in svg

    def test_css_cloned(self, recorder):
        doc = Document(stylesheets=[".node rect { fill: red; }\n.unused { color: blue; }"])
        api = MermaidAPI(document=doc)
        api.render("g1", "graph LR\nclassDef green fill:#9f6\na-->b\nclass a green", recorder.callback)
        svg = ET.fromstring(recorder.calls[0][0])
        style = svg[0]
        assert style.tag == q("style")
        assert ".node rect { fill: red; }" in style.text
        assert ".unused" not in style.text
        assert "#g1 .green>rect" in style.text

    def test_css_cloning_disabled(self, recorder):
        doc = Document(stylesheets=[".node rect { fill: red; }"])
        api = MermaidAPI(config={"cloneCssStyles": False}, document=doc)
        api.render("g1", FLOWCHART, recorder.callback)
        assert "<style" not in recorder.calls[0][0]

    def test_bind_functions(self, api, recorder):
        api.render("g1", 'graph LR\na-->b\nclick a showDetails "Details"', recorder.callback)
        svg, bind_functions = recorder.calls[0]
        root = ET.fromstring(svg)
        assert bind_functions(root) == ["a"]
        node = next(el for el in root.iter() if el.get("id") == "a")
        assert node.get("onclick") == "showDetails('a')"


# ─── Configuration ────────────────────────────────────────────────────────────


class TestConfiguration:
    def test_initialize_merges(self, api):
        api.initialize({"flowchart": {"htmlLabels": False}})
        assert api.get_config()["flowchart"] == {"htmlLabels": False, "useMaxWidth": True}

    def test_initialize_ignores_non_mapping(self, api):
        api.initialize("nope")
        api.initialize(None)
        assert api.get_config()["cloneCssStyles"] is True

    def test_instances_isolated(self):
        first, second = MermaidAPI(), MermaidAPI()
        first.initialize({"gantt": {"barHeight": 30}})
        assert second.get_config()["gantt"]["barHeight"] == 20

    def test_flowchart_config_applied(self, api, recorder):
        api.initialize({"flowchart": {"htmlLabels": False, "useMaxWidth": False}})
        svg = render_svg(api, recorder, FLOWCHART)
        assert svg.get("width") != "100%"
        assert not list(svg.iter(q("foreignObject")))

    def test_html_labels_by_default(self, api, recorder):
        svg = render_svg(api, recorder, FLOWCHART)
        assert svg.get("width") == "100%"
        assert list(svg.iter(q("foreignObject")))

    def test_sequence_config_applied(self, api, recorder):
        api.initialize({"sequenceDiagram": {"mirrorActors": False}})
        svg = render_svg(api, recorder, SEQUENCE)
        actors = [r for r in svg.iter(q("rect")) if r.get("class") == "actor"]
        assert len(actors) == 2

    def test_gantt_config_applied(self, api, recorder):
        api.initialize({"gantt": {"barHeight": 30}})
        svg = render_svg(api, recorder, GANTT)
        bars = [r for r in svg.iter(q("rect")) if (r.get("class") or "").startswith("task")]
        assert {r.get("height") for r in bars} == {"30"}


# ─── Module facade ────────────────────────────────────────────────────────────


@pytest.fixture
def facade(monkeypatch) -> MermaidAPI:
    api = MermaidAPI(document=Document())
    monkeypatch.setattr(mermaid_svg, "default_api", api)
    return api


class TestFacade:
    def test_parse(self, facade):
        assert mermaid_svg.parse(FLOWCHART) is True
        assert mermaid_svg.parse("graph TB\na--") is False

    def test_parse_error_handler(self, facade, recorder):
        mermaid_svg.set_parse_error_handler(recorder.on_error)
        mermaid_svg.parse("graph TB\na--")
        assert len(recorder.errors) == 1

    def test_render(self, facade, recorder):
        mermaid_svg.render("g1", FLOWCHART, recorder.callback)
        assert recorder.calls[0][0].startswith("<svg")

    def test_config_roundtrip(self, facade):
        mermaid_svg.initialize({"flowchart": {"htmlLabels": False}})
        mermaid_svg.set_config({"sequenceDiagram": {"width": 100}})
        config = mermaid_svg.get_config()
        assert config["flowchart"]["htmlLabels"] is False
        assert config["sequenceDiagram"]["width"] == 100
        assert config["sequenceDiagram"]["height"] == 65

    def test_detect_type(self, facade):
        assert mermaid_svg.detect_type("gantt") == DiagramType.GANTT
        assert mermaid_svg.detect_type("pie") is None

    def test_version(self):
        assert mermaid_svg.version() == mermaid_svg.__version__
