"""
Playwright Code Tool: run caller-supplied Playwright code against the current page.

The submitted text is the body of an ``async`` function with a single
parameter, ``page``. It is compiled as-is and executed without any isolation
from the host process; whatever it does to the page is the point of the tool.
"""

import ast
import asyncio
import builtins
import json
import logging
import re
import textwrap
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from playwright.async_api import expect
from pydantic import BaseModel, Field

from pagerun.common.logging_utils import log_tool_event

from ..capability import Capability, ToolType
from ..decorator import tab_tool
from ..response import Response
from ..tab import Tab
from ..tracing import call_on_page_no_trace

logger = logging.getLogger(__name__)

TOOL_NAME = "browser_playwright_code"
CODE_FILENAME = "<playwright-code>"
CODE_COMMENT = "# Executing custom Playwright code"
UNDEFINED = "undefined"

_FUNCTION_NAME = "__playwright_code__"
_FUNCTION_TEMPLATE = f"async def {_FUNCTION_NAME}(page):\n    pass\n"

PageFunction = Callable[[Any], Awaitable[Any]]


class PlaywrightCodeParams(BaseModel):
    code: str = Field(
        ...,
        description=(
            "Playwright code to execute. The code is the body of an async Python function "
            "that takes a `page` parameter (playwright.async_api.Page); use `await` for page "
            "calls and `return` a JSON-serializable value to report it."
        ),
    )


@dataclass
class CodeOutcome:
    """Terminal result of one invocation: success text or failure message."""
    ok: bool
    result: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "CodeOutcome":
        return cls(ok=True, result=text)

    @classmethod
    def failure(cls, message: str) -> "CodeOutcome":
        return cls(ok=False, error=message)


def _code_namespace() -> Dict[str, Any]:
    return {
        "__builtins__": builtins,
        "__name__": _FUNCTION_NAME,
        "asyncio": asyncio,
        "expect": expect,
        "json": json,
        "re": re,
    }


def compile_page_function(code: str) -> PageFunction:
    """
    Compile ``code`` into ``async def __playwright_code__(page)``.

    Common leading indentation is stripped first.
    The body is parsed on its own and grafted into the function template, so
    line numbers in tracebacks and syntax errors match the submitted text.

    Raises:
        SyntaxError: If ``code`` is not a valid function body.
    """
    body = ast.parse(textwrap.dedent(code), filename=CODE_FILENAME, mode="exec")
    module = ast.parse(_FUNCTION_TEMPLATE, filename=CODE_FILENAME, mode="exec")
    function_def = module.body[0]
    if body.body:
        function_def.body = body.body
    ast.fix_missing_locations(module)

    compiled = compile(module, CODE_FILENAME, "exec")
    namespace = _code_namespace()
    exec(compiled, namespace)  # noqa: S102
    return namespace[_FUNCTION_NAME]


def serialize_result(value: Any) -> str:
    """Pretty JSON for a returned value; ``undefined`` when there is none."""
    if value is None:
        return UNDEFINED
    return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False) or UNDEFINED


def _task_is_cancelling() -> bool:
    task = asyncio.current_task()
    cancelling = getattr(task, "cancelling", None)
    if cancelling is None:
        return True
    return cancelling() > 0


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, SyntaxError):
        return f"Error: {type(exc).__name__}: {exc}"
    return f"Error: {str(exc) or type(exc).__name__}"


async def execute_playwright_code(tab: Tab, code: str) -> CodeOutcome:
    """
    Compile ``code`` and run it against ``tab.page`` with tracing suspended.

    Every compile, run or serialisation failure becomes a failure outcome;
    this coroutine does not raise for anything the submitted code does.
    """
    log_tool_event(logger, level=logging.DEBUG, tool=TOOL_NAME, event="start", code=code)
    try:
        page_function = compile_page_function(code)
        value = await call_on_page_no_trace(tab, page_function)
        text = serialize_result(value)
    except asyncio.CancelledError as exc:
        # Only a CancelledError raised by the code itself is an outcome
        if _task_is_cancelling():
            raise
        message = _error_message(exc)
        log_tool_event(logger, level=logging.INFO, tool=TOOL_NAME, event="failed", error=message)
        return CodeOutcome.failure(message)
    except (Exception, SystemExit) as exc:
        message = _error_message(exc)
        log_tool_event(logger, level=logging.INFO, tool=TOOL_NAME, event="failed", error=message)
        return CodeOutcome.failure(message)

    log_tool_event(logger, level=logging.DEBUG, tool=TOOL_NAME, event="settled", result_chars=len(text))
    return CodeOutcome.success(text)


@tab_tool(
    name=TOOL_NAME,
    title="Execute Playwright Code",
    description=(
        "Execute arbitrary Playwright code directly. This allows for advanced automation tasks "
        "that are not covered by other tools. The code is the body of an async Python function "
        "that receives the Playwright `page`. Example: "
        "await page.goto(\"https://example.com\"); "
        "await page.fill('input[name=\"search\"]', \"test\"); "
        "await page.click('button[type=\"submit\"]'); "
        "return await page.title()"
    ),
    input_model=PlaywrightCodeParams,
    capability=Capability.CORE,
    type=ToolType.DESTRUCTIVE,
)
async def browser_playwright_code(tab: Tab, params: PlaywrightCodeParams, response: Response) -> None:
    response.set_include_snapshot()
    response.add_code(CODE_COMMENT)
    response.add_code(params.code)

    outcome = await execute_playwright_code(tab, params.code)
    if outcome.ok:
        response.add_result(outcome.result)
    else:
        response.add_error(outcome.error)
