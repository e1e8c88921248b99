"""
Tests for the tool building blocks: capability parsing, decorator,
response rendering, tracer and tab.
"""

import logging

import pytest
from pydantic import BaseModel

from pagerun.tool.capability import Capability, ToolType, parse_capabilities
from pagerun.tool.decorator import tab_tool
from pagerun.tool.response import Response
from pagerun.tool.tab import PageSnapshot, Tab
from pagerun.tool.tracing import ActionTracer, call_on_page_no_trace


# ============================================================
# Capability
# ============================================================

def test_parse_capabilities():
    assert parse_capabilities(["vision", " PDF ", ""]) == {Capability.VISION, Capability.PDF}


def test_parse_capabilities_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown capability 'bogus'"):
        parse_capabilities(["bogus"])


def test_core_capabilities_always_enabled():
    assert Capability.CORE.always_enabled
    assert Capability.CORE_TABS.always_enabled
    assert not Capability.PDF.always_enabled


# ============================================================
# Decorator
# ============================================================

class EmptyParams(BaseModel):
    pass


def test_tab_tool_defaults_from_docstring():
    @tab_tool(name="browser_snapshot", input_model=EmptyParams)
    async def snapshot(tab, params, response):
        """Capture accessibility snapshot of the current page."""

    metadata = snapshot.metadata
    assert metadata.title == "browser_snapshot"
    assert metadata.description == "Capture accessibility snapshot of the current page."
    assert metadata.type is ToolType.READ_ONLY
    assert metadata.to_mcp_tool()["annotations"]["readOnlyHint"] is True
    assert snapshot.schema["function"]["parameters"]["properties"] == {}


def test_tab_tool_requires_async_handler():
    with pytest.raises(TypeError):
        @tab_tool(name="sync_tool", input_model=EmptyParams)
        def sync_tool(tab, params, response):
            pass


# ============================================================
# Response
# ============================================================

def test_response_serialize_sections():
    response = Response()
    response.add_code("# comment")
    response.add_code("return 1")
    response.add_result("1")
    response.set_include_snapshot()

    snapshot = PageSnapshot(url="https://example.com/", title="Example", aria_snapshot="- text: hi")
    text = response.serialize(snapshot)

    assert text == (
        "### Ran Playwright code\n"
        "```python\n# comment\nreturn 1\n```\n\n"
        "### Result\n1\n\n"
        "### Page state\n"
        "- Page URL: https://example.com/\n"
        "- Page Title: Example\n"
        "- Page Snapshot:\n"
        "```yaml\n- text: hi\n```"
    )


def test_response_without_snapshot_flag_ignores_snapshot():
    response = Response()
    response.add_result("ok")
    snapshot = PageSnapshot(url="u", title="t", aria_snapshot="s")
    assert "### Page state" not in response.serialize(snapshot)


def test_response_error_sets_flag():
    response = Response()
    response.add_error("Error: x")
    assert response.is_error
    assert response.to_dict() == {
        "content": [{"type": "text", "text": "### Result\nError: x"}],
        "isError": True,
    }


# ============================================================
# Tracer
# ============================================================

def test_tracer_records_and_suppresses():
    tracer = ActionTracer()
    assert tracer.record("navigation", url="a")

    with tracer.suppressed():
        with tracer.suppressed():
            assert not tracer.record("navigation", url="b")
        assert tracer.is_suppressed
        assert not tracer.record("navigation", url="c")

    assert not tracer.is_suppressed
    assert tracer.record("navigation", url="d")
    assert [e.detail["url"] for e in tracer.events()] == ["a", "d"]
    assert tracer.dropped == 2


def test_tracer_disabled_records_nothing():
    tracer = ActionTracer(enabled=False)
    assert not tracer.record("console", text="x")
    assert len(tracer) == 0
    assert tracer.dropped == 0


def test_tracer_is_bounded():
    tracer = ActionTracer(max_events=3)
    for i in range(5):
        tracer.record("console", text=str(i))
    assert [e.detail["text"] for e in tracer.events()] == ["2", "3", "4"]


def test_suppression_restored_when_block_raises():
    tracer = ActionTracer()
    with pytest.raises(RuntimeError):
        with tracer.suppressed():
            raise RuntimeError("boom")
    assert not tracer.is_suppressed


@pytest.mark.asyncio
async def test_call_on_page_no_trace_passes_page(tab, fake_page):
    seen = {}

    async def action(page):
        seen["page"] = page
        seen["suppressed"] = tab.tracer.is_suppressed
        return "value"

    assert await call_on_page_no_trace(tab, action) == "value"
    assert seen == {"page": fake_page, "suppressed": True}
    assert not tab.tracer.is_suppressed


# ============================================================
# Tab
# ============================================================

def test_tab_records_page_events(page_factory, console_message_factory, frame_factory):
    page = page_factory()
    tab = Tab(page)

    page.emit("console", console_message_factory("error", "boom"))
    page.emit("framenavigated", frame_factory("https://child/", parent_frame=frame_factory("https://top/")))
    page.emit("framenavigated", frame_factory("https://top/"))

    events = [e.to_dict() for e in tab.tracer.events()]
    assert events[0]["kind"] == "console"
    assert events[0]["console_type"] == "error"
    assert events[0]["text"] == "boom"
    assert [e["kind"] for e in events] == ["console", "navigation"]
    assert events[1]["url"] == "https://top/"


def test_tab_records_console_with_debug_logging(page_factory, console_message_factory, caplog):
    page = page_factory()
    tab = Tab(page)

    with caplog.at_level(logging.DEBUG, logger="pagerun.tool.tracing"):
        page.emit("console", console_message_factory("warning", "deprecated api"))

    [event] = tab.tracer.events()
    assert event.kind == "console"
    assert event.detail == {"console_type": "warning", "text": "deprecated api"}
    assert "event=trace.console console_type=warning text=deprecated api" in caplog.text


def test_tab_keeps_empty_tracer_passed_in(page_factory, console_message_factory):
    tracer = ActionTracer(max_events=5)
    assert len(tracer) == 0

    tab = Tab(page_factory(), tracer=tracer)
    tab.page.emit("console", console_message_factory("log", "hello"))

    assert tab.tracer is tracer
    assert [e.detail["text"] for e in tracer.events()] == ["hello"]


def test_tab_without_tracing_does_not_listen(page_factory):
    page = page_factory()
    tab = Tab(page, trace_events=False)
    page.emit("console", object())
    assert len(tab.tracer) == 0


@pytest.mark.asyncio
async def test_capture_snapshot(tab):
    snapshot = await tab.capture_snapshot()
    assert snapshot.url == "https://example.com/"
    assert snapshot.title == "Example Domain"
    assert snapshot.aria_snapshot == '- heading "Example Domain" [level=1]'
    assert snapshot.error is None
