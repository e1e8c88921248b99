"""
Core Tools: page interaction on the current tab, always exposed.
"""

from .playwright_code import browser_playwright_code

__all__ = [
    "browser_playwright_code",
]
