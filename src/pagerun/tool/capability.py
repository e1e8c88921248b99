"""
Capability: which tool group a tool belongs to, and what kind of effect it has.

Capabilities decide exposure: every ``core*`` tool is always offered to the
caller, the rest only when requested (``--caps vision,pdf``).

Usage:
    @tab_tool(capability=Capability.CORE, type=ToolType.DESTRUCTIVE, ...)
    async def my_tool(tab, params, response):
        ...
"""

from enum import Enum
from typing import Iterable, Set


class Capability(str, Enum):
    """Tool groups a registry can expose."""

    CORE = "core"                   # Page interaction on the current tab
    CORE_TABS = "core-tabs"         # Tab management
    CORE_INSTALL = "core-install"   # Browser installation
    VISION = "vision"               # Coordinate-based interaction
    PDF = "pdf"                     # PDF generation

    @property
    def always_enabled(self) -> bool:
        return self.value.startswith("core")


class ToolType(str, Enum):
    """Effect classification surfaced to the invoking agent."""

    READ_ONLY = "readOnly"
    DESTRUCTIVE = "destructive"


def parse_capabilities(values: Iterable[str]) -> Set[Capability]:
    """Parse capability names, raising ValueError on unknown ones."""
    parsed: Set[Capability] = set()
    for raw in values:
        name = str(raw).strip().lower()
        if not name:
            continue
        try:
            parsed.add(Capability(name))
        except ValueError:
            valid = ", ".join(cap.value for cap in Capability)
            raise ValueError(f"Unknown capability '{raw}'. Valid: {valid}") from None
    return parsed
