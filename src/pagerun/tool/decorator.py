"""
Tool Decorator: single source of truth for tab tool definitions.

Automatically generates:
- JSON schema (OpenAI function calling format)
- MCP tool listing (name, inputSchema, annotations)
- Argument validation through the tool's pydantic input model

Usage:
    from pydantic import BaseModel, Field
    from pagerun.tool.decorator import tab_tool
    from pagerun.tool.capability import Capability, ToolType

    class NavigateParams(BaseModel):
        url: str = Field(..., description="The URL to navigate to")

    @tab_tool(
        name="browser_navigate",
        title="Navigate to a URL",
        description="Navigate to a URL",
        input_model=NavigateParams,
        capability=Capability.CORE,
        type=ToolType.DESTRUCTIVE,
    )
    async def navigate(tab, params: NavigateParams, response):
        ...

Every handler has the same signature: ``(tab, params, response)``.
"""

import asyncio
import inspect
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type

from pydantic import BaseModel

from .capability import Capability, ToolType
from .response import Response
from .tab import Tab

TabToolHandler = Callable[[Tab, BaseModel, Response], Awaitable[None]]


def _clean_model_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Pydantic JSON schema without the model-level title noise."""
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    schema.setdefault("properties", {})
    schema.setdefault("required", [])
    schema["additionalProperties"] = False
    return schema


@dataclass
class ToolMetadata:
    """Complete metadata for a tab tool, extracted from the decorated handler."""
    name: str
    title: str
    description: str
    capability: Capability
    type: ToolType
    input_model: Type[BaseModel]
    func: TabToolHandler

    def input_schema(self) -> Dict[str, Any]:
        return _clean_model_schema(self.input_model)

    def to_json_schema(self) -> Dict[str, Any]:
        """Generate OpenAI function calling format schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema(),
            },
        }

    def to_mcp_tool(self) -> Dict[str, Any]:
        """Generate an MCP ``tools/list`` entry."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
            "annotations": {
                "title": self.title,
                "readOnlyHint": self.type is ToolType.READ_ONLY,
                "destructiveHint": self.type is ToolType.DESTRUCTIVE,
                "openWorldHint": True,
            },
        }

    def parse_params(self, arguments: Optional[Mapping[str, Any]]) -> BaseModel:
        """Validate raw arguments; raises pydantic.ValidationError."""
        return self.input_model.model_validate(dict(arguments or {}))

    async def execute(self, tab: Tab, params: BaseModel, response: Response) -> None:
        """Run the handler against a tab, filling ``response``."""
        await self.func(tab, params, response)


# ═══════════════════════════════════════════════════════════════════
# THE DECORATOR
# ═══════════════════════════════════════════════════════════════════

def tab_tool(
    *,
    name: str,
    input_model: Type[BaseModel],
    title: str = None,
    description: str = None,
    capability: Capability = Capability.CORE,
    type: ToolType = ToolType.READ_ONLY,
) -> Callable:
    """
    Decorator that turns an async ``(tab, params, response)`` handler into a tool.

    Args:
        name: Tool name exposed to callers.
        input_model: Pydantic model describing and validating the arguments.
        title: Human-readable title (defaults to the name).
        description: What the tool does (defaults to the handler docstring).
        capability: Tool group that decides exposure.
        type: Effect classification (read-only or destructive).

    Returns:
        Decorated handler with a ``.metadata`` attribute holding ToolMetadata.
    """

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"Tab tool handler {func.__name__} must be async")

        metadata = ToolMetadata(
            name=name,
            title=title or name,
            description=description or inspect.getdoc(func) or "",
            capability=Capability(capability),
            type=ToolType(type),
            input_model=input_model,
            func=func,
        )

        @wraps(func)
        async def wrapper(tab, params, response):
            return await func(tab, params, response)

        wrapper.metadata = metadata
        wrapper.schema = metadata.to_json_schema()
        wrapper.capability = metadata.capability
        return wrapper

    return decorator
