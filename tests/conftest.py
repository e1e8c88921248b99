"""
Shared in-process fakes: a Playwright-like page that needs no browser.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from pagerun.tool.tab import Tab


class FakeFrame:
    def __init__(self, url: str, parent_frame: Optional["FakeFrame"] = None):
        self.url = url
        self.parent_frame = parent_frame


class FakeConsoleMessage:
    def __init__(self, type: str, text: str):
        self.type = type
        self.text = text


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def aria_snapshot(self) -> str:
        if self.page.snapshot_error is not None:
            raise self.page.snapshot_error
        return f'- heading "{self.page.page_title}" [level=1]'


class FakePage:
    """Subset of playwright.async_api.Page used by tools and tests."""

    def __init__(self, url: str = "about:blank", title: str = ""):
        self.url = url
        self.page_title = title
        self.clicks: List[str] = []
        self.filled: Dict[str, str] = {}
        self.snapshot_error: Optional[Exception] = None
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in self._handlers.get(event, []):
            handler(payload)

    async def goto(self, url: str, **_):
        await asyncio.sleep(0)
        self.url = url
        self.page_title = f"Title of {url}"
        self.emit("framenavigated", FakeFrame(url))

    async def title(self) -> str:
        return self.page_title

    async def click(self, selector: str, **_):
        self.clicks.append(selector)

    async def fill(self, selector: str, value: str, **_):
        self.filled[selector] = value

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage(url="https://example.com/", title="Example Domain")


@pytest.fixture
def tab(fake_page: FakePage) -> Tab:
    return Tab(fake_page)


@pytest.fixture
def page_factory() -> Callable[..., FakePage]:
    return FakePage


@pytest.fixture
def console_message_factory() -> Callable[..., FakeConsoleMessage]:
    return FakeConsoleMessage


@pytest.fixture
def frame_factory() -> Callable[..., FakeFrame]:
    return FakeFrame
