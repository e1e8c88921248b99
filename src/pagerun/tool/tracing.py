"""
Action tracing for a tab.

The tracer records what happens on a page (navigations, console output,
dialogs, downloads, explicit tool actions) so the caller can inspect a tab's
history. Recording can be suspended for the duration of one call with
``suppressed()``; ``call_on_page_no_trace`` is the tool-facing wrapper.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Deque, Dict, Iterator, List, TypeVar

from pagerun.common.logging_utils import log_browser_event

if TYPE_CHECKING:
    from pagerun.tool.tab import Tab

logger = logging.getLogger(__name__)

MAX_TRACE_EVENTS = 200

T = TypeVar("T")


@dataclass
class TraceEvent:
    kind: str
    detail: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "timestamp": self.timestamp, **self.detail}


class ActionTracer:
    """
    Bounded in-memory recorder of page events.

    Suppression is a depth counter so nested suppressed calls restore
    correctly; events arriving while the depth is positive are dropped.
    """

    def __init__(self, enabled: bool = True, max_events: int = MAX_TRACE_EVENTS) -> None:
        self.enabled = bool(enabled)
        self._events: Deque[TraceEvent] = deque(maxlen=max(1, int(max_events)))
        self._suppress_depth = 0
        self.dropped = 0

    @property
    def is_suppressed(self) -> bool:
        return self._suppress_depth > 0

    @property
    def is_recording(self) -> bool:
        return self.enabled and not self.is_suppressed

    def record(self, kind: str, **detail: Any) -> bool:
        """Record one event. Returns False when it was dropped."""
        if not self.enabled:
            return False
        if self.is_suppressed:
            self.dropped += 1
            return False
        self._events.append(TraceEvent(kind=kind, detail=detail))
        log_browser_event(logger, level=logging.DEBUG, event=f"trace.{kind}", **detail)
        return True

    @contextmanager
    def suppressed(self) -> Iterator["ActionTracer"]:
        self._suppress_depth += 1
        try:
            yield self
        finally:
            self._suppress_depth -= 1

    def events(self) -> List[TraceEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


async def call_on_page_no_trace(tab: "Tab", fn: Callable[[Any], Awaitable[T]]) -> T:
    """
    Await ``fn(tab.page)`` with the tab's tracer suspended.

    The previous tracing state is restored whether ``fn`` returns or raises.
    """
    with tab.tracer.suppressed():
        return await fn(tab.page)
