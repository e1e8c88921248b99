#!/usr/bin/env python3
"""
pagerun demo - run Playwright code through the tool registry.

Usage:
    python examples/playwright_code_demo.py

Or with a specific URL:
    python examples/playwright_code_demo.py https://example.com
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pagerun.browser import BrowserSession
from pagerun.common.logger import setup_logging
from pagerun.config import PagerunConfig
from pagerun.tool.registry import ToolRegistry

DEMO_CODE = """
heading = await page.locator("h1").first.inner_text()
links = await page.locator("a").evaluate_all("els => els.map(e => e.href)")
return {"title": await page.title(), "heading": heading, "links": links}
"""


async def main(url: str) -> None:
    registry = ToolRegistry()
    registry.discover()

    async with BrowserSession(PagerunConfig.from_env()) as session:
        await session.tab.page.goto(url)

        result = await registry.execute("browser_playwright_code", session.tab, {"code": DEMO_CODE})
        print(result.text)
        print()

        # A failing body is reported, not raised
        result = await registry.execute("browser_playwright_code", session.tab, {"code": "await page.click('#missing', timeout=500)"})
        print(result.text)

        print()
        print(f"Traced events: {[event.kind for event in session.tab.tracer.events()]}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "https://example.com"))
