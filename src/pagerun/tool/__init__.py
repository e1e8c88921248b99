"""
pagerun tool system.

Provides a unified interface for tab tool definitions and execution.

Structure:
    - core/: Always-exposed page interaction tools
    - decorator: @tab_tool decorator for defining tools
    - capability: Capability and ToolType enums
    - registry: Auto-discovery, exposure and execution
    - response / tab / tracing: what a handler works with
"""

from .capability import Capability, ToolType
from .decorator import ToolMetadata, tab_tool
from .registry import ToolRegistry, ToolResult, get_registry, get_schemas, get_tool
from .response import Response
from .tab import PageSnapshot, Tab
from .tracing import ActionTracer, call_on_page_no_trace

__all__ = [
    # Decorator
    "tab_tool",
    "ToolMetadata",
    # Capability
    "Capability",
    "ToolType",
    # Registry
    "ToolRegistry",
    "ToolResult",
    "get_registry",
    "get_tool",
    "get_schemas",
    # Handler collaborators
    "Response",
    "Tab",
    "PageSnapshot",
    "ActionTracer",
    "call_on_page_no_trace",
]
