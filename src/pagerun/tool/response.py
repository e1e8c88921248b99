"""
Response: what a tool hands back to the caller.

Handlers append code lines, one result or error, and may ask for a page
snapshot. ``serialize`` renders everything as Markdown sections.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pagerun.tool.tab import PageSnapshot


class Response:
    """Per-invocation response builder."""

    def __init__(self, tool_name: str = "", code_language: str = "python") -> None:
        self.tool_name = tool_name
        self.code_language = code_language
        self._code: List[str] = []
        self._results: List[str] = []
        self._include_snapshot = False
        self._is_error = False

    def set_include_snapshot(self) -> None:
        self._include_snapshot = True

    @property
    def include_snapshot(self) -> bool:
        return self._include_snapshot

    def add_code(self, code: str) -> None:
        self._code.append(code)

    @property
    def code(self) -> List[str]:
        return list(self._code)

    def add_result(self, result: str) -> None:
        self._results.append(result)

    def add_error(self, error: str) -> None:
        self._results.append(error)
        self._is_error = True

    @property
    def result(self) -> str:
        return "\n".join(self._results)

    @property
    def is_error(self) -> bool:
        return self._is_error

    def serialize(self, snapshot: Optional[PageSnapshot] = None) -> str:
        sections: List[str] = []
        if self._code:
            sections.append(
                "### Ran Playwright code\n"
                f"```{self.code_language}\n" + "\n".join(self._code) + "\n```"
            )
        if self._results:
            sections.append("### Result\n" + self.result)
        if self._include_snapshot and snapshot is not None:
            sections.append("### Page state\n" + snapshot.render())
        return "\n\n".join(sections)

    def to_dict(self, snapshot: Optional[PageSnapshot] = None) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.serialize(snapshot)}],
            "isError": self._is_error,
        }
