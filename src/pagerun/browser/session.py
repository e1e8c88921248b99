"""
Local Playwright browser session.

Starts Playwright, launches Chromium (explicit executable, installed channel,
then bundled Chromium), opens one context and page, and exposes it as a
``Tab``. Use it as an async context manager:

    async with BrowserSession(config) as session:
        result = await registry.execute("browser_playwright_code", session.tab, {...})
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pagerun.common.logging_utils import log_browser_event
from pagerun.config import PagerunConfig
from pagerun.tool.tab import Tab

logger = logging.getLogger(__name__)

COMMON_LAUNCH_ARGS = [
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--no-default-browser-check",
]


def _compact_exception_message(exc: Exception) -> str:
    text = str(exc).strip()
    if not text:
        return exc.__class__.__name__
    lowered = text.lower()
    if "no such file or directory" in lowered:
        return "executable not found"
    if "executable doesn't exist" in lowered:
        return "browser not installed (run `playwright install chromium`)"
    if len(text) > 220:
        return text[:220] + "..."
    return text


def build_launch_candidates(config: PagerunConfig) -> List[Dict[str, Any]]:
    """Ordered launch attempts: executable path, channel, bundled Chromium."""
    def candidate(label: str, **extra: Any) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "headless": bool(config.headless),
            "args": list(COMMON_LAUNCH_ARGS),
        }
        kwargs.update(extra)
        return {"label": label, "kwargs": kwargs}

    candidates: List[Dict[str, Any]] = []
    if config.executable_path:
        candidates.append(candidate("chromium-executable", executable_path=config.executable_path))
    if config.browser_channel:
        candidates.append(candidate(f"chromium-channel:{config.browser_channel}", channel=config.browser_channel))
    candidates.append(candidate("chromium-default"))
    return candidates


class BrowserSession:
    """One browser, one context, one tab."""

    def __init__(self, config: Optional[PagerunConfig] = None) -> None:
        self.config = config or PagerunConfig()
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._tab: Optional[Tab] = None
        self.launch_strategy: Optional[str] = None

    @property
    def started(self) -> bool:
        return self._tab is not None

    @property
    def tab(self) -> Tab:
        if self._tab is None:
            raise RuntimeError("Browser session is not started")
        return self._tab

    async def _launch_browser_with_fallback(self, playwright: Any) -> Tuple[Any, str]:
        failures: List[str] = []
        for entry in build_launch_candidates(self.config):
            label = entry["label"]
            try:
                browser = await playwright.chromium.launch(**entry["kwargs"])
                return browser, label
            except Exception as exc:
                failures.append(f"{label}: {_compact_exception_message(exc)}")

        guidance = [
            "Failed to launch browser automation.",
            "Set `PAGERUN_BROWSER_CHANNEL=chrome` or `PAGERUN_EXECUTABLE_PATH=/path/to/chrome`, "
            "or run `playwright install chromium`, and retry.",
        ]
        if failures:
            guidance.append("Attempts: " + " | ".join(failures[:5]))
        raise RuntimeError(" ".join(guidance))

    async def start(self) -> Tab:
        if self._tab is not None:
            return self._tab

        try:
            from playwright.async_api import async_playwright
        except ImportError as exc:
            raise RuntimeError(
                "playwright is not installed. Install it with: pip install playwright"
            ) from exc

        try:
            self._playwright = await async_playwright().start()
            self._browser, self.launch_strategy = await self._launch_browser_with_fallback(self._playwright)
            self._context = await self._browser.new_context()
            self._context.set_default_timeout(self.config.default_timeout_ms)
            page = await self._context.new_page()
        except Exception:
            await self._cleanup()
            raise

        self._tab = Tab(page, trace_events=self.config.trace_actions)
        log_browser_event(
            logger,
            level=logging.INFO,
            event="session_started",
            headless=self.config.headless,
            launch_strategy=self.launch_strategy,
        )
        return self._tab

    async def _cleanup(self) -> None:
        context, browser, playwright = self._context, self._browser, self._playwright
        self._context = None
        self._browser = None
        self._playwright = None
        self._tab = None

        for label, closer in (
            ("context", getattr(context, "close", None)),
            ("browser", getattr(browser, "close", None)),
            ("playwright", getattr(playwright, "stop", None)),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as exc:
                logger.debug("Ignoring %s shutdown error: %s", label, exc)

    async def stop(self) -> None:
        if self._tab is None and self._playwright is None:
            return
        context, browser, playwright = self._context, self._browser, self._playwright
        self._context = None
        self._browser = None
        self._playwright = None
        self._tab = None
        try:
            if context is not None:
                await context.close()
        finally:
            try:
                if browser is not None:
                    await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()
        log_browser_event(logger, level=logging.INFO, event="session_stopped")

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
