"""
Tool Registry: Auto-discovery, exposure and execution of tab tools.

Discovers tools from the core/ directory, decides which ones are exposed for
a set of capabilities, and runs them against a tab.

Usage:
    from pagerun.tool.registry import ToolRegistry

    registry = ToolRegistry()
    registry.discover()

    # Schemas for the tools the caller may use
    schemas = registry.get_schemas(capabilities={Capability.PDF})

    # Execute a tool
    result = await registry.execute("browser_playwright_code", tab, {"code": "return 1"})
"""

import asyncio
import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from pagerun.common.logging_utils import log_tool_event

from .capability import Capability
from .decorator import ToolMetadata
from .response import Response
from .tab import PageSnapshot, Tab

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Serialised outcome of one tool call."""
    name: str
    response: Response
    snapshot: Optional[PageSnapshot] = None

    @property
    def is_error(self) -> bool:
        return self.response.is_error

    @property
    def text(self) -> str:
        return self.response.serialize(self.snapshot)

    def to_dict(self) -> Dict[str, Any]:
        return self.response.to_dict(self.snapshot)


class ToolRegistry:
    """
    Central registry for tab tools.

    Provides:
    - Schema access for LLM function calling and MCP listing
    - Capability-based exposure
    - Unified execution with argument validation and snapshot capture
    """

    def __init__(self, *, include_snapshots: bool = True):
        self._tools: Dict[str, ToolMetadata] = {}
        self._discovered = False
        self.include_snapshots = include_snapshots

    def discover(self, base_path: Path = None) -> None:
        """
        Discover all tools from the core/ directory.

        Args:
            base_path: Base path to search (defaults to this module's directory)
        """
        if base_path is None:
            base_path = Path(__file__).parent

        tier_path = base_path / "core"
        if tier_path.exists():
            self._discover_tier(tier_path, "core")

        self._discovered = True
        logger.info("Discovered %d tools: %s", len(self._tools), list(self._tools.keys()))

    def _discover_tier(self, tier_path: Path, tier_name: str) -> None:
        """Discover tools from a single tier directory."""
        for file_path in sorted(tier_path.glob("*.py")):
            if file_path.name.startswith("_"):
                continue

            full_module = f"pagerun.tool.{tier_name}.{file_path.stem}"
            try:
                module = importlib.import_module(full_module)
            except ImportError as e:
                logger.warning("Failed to load tool module %s: %s", full_module, e)
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if callable(attr) and isinstance(getattr(attr, "metadata", None), ToolMetadata):
                    self._tools[attr.metadata.name] = attr.metadata
                    logger.debug("Registered tool: %s from %s/", attr.metadata.name, tier_name)

    def register(self, func: Callable) -> None:
        """
        Manually register a decorated tool handler.

        Args:
            func: A handler decorated with @tab_tool
        """
        metadata = getattr(func, "metadata", None)
        if not isinstance(metadata, ToolMetadata):
            raise ValueError(f"Function {getattr(func, '__name__', func)!r} is not decorated with @tab_tool")
        self._tools[metadata.name] = metadata

    def get(self, name: str) -> Optional[ToolMetadata]:
        """Get tool metadata by name."""
        return self._tools.get(name)

    def enabled_tools(self, capabilities: Iterable[Capability] = ()) -> List[ToolMetadata]:
        """Tools exposed for the requested capabilities; core tools are always exposed."""
        requested = set(capabilities)
        return [
            t for t in self._tools.values()
            if t.capability.always_enabled or t.capability in requested
        ]

    def get_schemas(self, capabilities: Iterable[Capability] = ()) -> List[Dict[str, Any]]:
        """JSON schemas (OpenAI function calling format) of the exposed tools."""
        return [t.to_json_schema() for t in self.enabled_tools(capabilities)]

    def list_mcp_tools(self, capabilities: Iterable[Capability] = ()) -> List[Dict[str, Any]]:
        """MCP tool entries of the exposed tools."""
        return [t.to_mcp_tool() for t in self.enabled_tools(capabilities)]

    async def execute(
        self,
        name: str,
        tab: Tab,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ToolResult:
        """
        Execute a tool by name against a tab.

        Args:
            name: Tool name
            tab: Tab the tool acts on
            arguments: Raw tool arguments, validated with the tool's input model
            timeout: Optional limit in seconds for the handler

        Returns:
            ToolResult with the filled response and, if requested, a page snapshot

        Raises:
            KeyError: If tool not found
        """
        tool = self._tools.get(name)
        if not tool:
            raise KeyError(f"Tool not found: {name}")

        response = Response(tool_name=name)
        try:
            params = tool.parse_params(arguments)
        except ValidationError as e:
            log_tool_event(logger, level=logging.INFO, tool=name, event="invalid_arguments", errors=e.error_count())
            response.add_error(f"Error: Invalid arguments for {name}: {e}")
            return ToolResult(name=name, response=response)

        tab.tracer.record("tool", name=name)
        if timeout is None:
            await tool.execute(tab, params, response)
        else:
            try:
                await asyncio.wait_for(tool.execute(tab, params, response), timeout=timeout)
            except asyncio.TimeoutError:
                log_tool_event(logger, level=logging.WARNING, tool=name, event="timeout", timeout=timeout)
                response.add_error(f"Error: {name} timed out after {timeout}s")

        snapshot = None
        if response.include_snapshot and self.include_snapshots:
            snapshot = await tab.capture_snapshot()
        return ToolResult(name=name, response=response, snapshot=snapshot)

    @property
    def tool_names(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self):
        return iter(self._tools.values())


# Global registry instance
_global_registry: Optional[ToolRegistry] = None


def get_registry() -> ToolRegistry:
    """Get the global tool registry, discovering tools if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = ToolRegistry()
        _global_registry.discover()
    return _global_registry


def get_tool(name: str) -> Optional[ToolMetadata]:
    """Get a tool by name from the global registry."""
    return get_registry().get(name)


def get_schemas(capabilities: Iterable[Capability] = ()) -> List[Dict[str, Any]]:
    """Get tool schemas from the global registry."""
    return get_registry().get_schemas(capabilities)
