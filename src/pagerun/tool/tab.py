"""
Tab: the page handle tools operate on.

A Tab owns nothing about the browser lifecycle; it wraps one Playwright
``Page``, records its events on an ``ActionTracer`` and can capture the
post-action page state that responses attach.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pagerun.common.logging_utils import log_browser_event
from pagerun.tool.tracing import ActionTracer

logger = logging.getLogger(__name__)


@dataclass
class PageSnapshot:
    url: str
    title: str
    aria_snapshot: Optional[str] = None
    error: Optional[str] = None

    def render(self) -> str:
        lines = [
            f"- Page URL: {self.url}",
            f"- Page Title: {self.title}",
        ]
        if self.error:
            lines.append(f"- Page Snapshot: unavailable ({self.error})")
        else:
            lines.append("- Page Snapshot:")
            lines.append("```yaml")
            lines.append(self.aria_snapshot or "")
            lines.append("```")
        return "\n".join(lines)


class Tab:
    """One live browser page plus its tracer."""

    def __init__(self, page: Any, *, tracer: Optional[ActionTracer] = None, trace_events: bool = True) -> None:
        self.page = page
        self.tracer = tracer if tracer is not None else ActionTracer(enabled=trace_events)
        self._listening = False
        if trace_events:
            self.attach_listeners()

    def attach_listeners(self) -> None:
        """Subscribe the tracer to page events (idempotent)."""
        if self._listening:
            return
        on = getattr(self.page, "on", None)
        if not callable(on):
            return
        on("framenavigated", self._on_frame_navigated)
        on("console", self._on_console)
        on("dialog", self._on_dialog)
        on("download", self._on_download)
        on("pageerror", self._on_page_error)
        self._listening = True

    # Page event handlers ____________________________________________________

    def _on_frame_navigated(self, frame: Any) -> None:
        if getattr(frame, "parent_frame", None) is not None:
            return
        self.tracer.record("navigation", url=getattr(frame, "url", ""))

    def _on_console(self, message: Any) -> None:
        self.tracer.record("console", console_type=getattr(message, "type", ""), text=getattr(message, "text", ""))

    def _on_dialog(self, dialog: Any) -> None:
        self.tracer.record("dialog", dialog_type=getattr(dialog, "type", ""), message=getattr(dialog, "message", ""))

    def _on_download(self, download: Any) -> None:
        self.tracer.record("download", filename=getattr(download, "suggested_filename", ""))

    def _on_page_error(self, error: Any) -> None:
        self.tracer.record("pageerror", message=str(error))

    # Snapshot _______________________________________________________________

    @property
    def url(self) -> str:
        return str(getattr(self.page, "url", "") or "")

    async def title(self) -> str:
        try:
            return str(await self.page.title() or "")
        except Exception as exc:
            logger.debug("Reading page title failed: %s", exc)
            return ""

    async def capture_snapshot(self) -> PageSnapshot:
        """
        Capture URL, title and the ARIA snapshot of the page body.

        A snapshot failure is reported on the returned object, never raised,
        so it cannot mask the outcome of the action that preceded it.
        """
        url = self.url
        title = await self.title()
        try:
            aria = await self.page.locator("body").aria_snapshot()
        except Exception as exc:
            log_browser_event(logger, level=logging.WARNING, event="snapshot_failed", url=url, error=exc)
            return PageSnapshot(url=url, title=title, error=str(exc) or type(exc).__name__)
        return PageSnapshot(url=url, title=title, aria_snapshot=aria)
