"""Structured key=value logging for browser and tool events."""

from __future__ import annotations

import logging
from typing import Any, Mapping

MAX_LOG_VALUE_CHARS = 200


def _normalize_log_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).replace("\n", "\\n")
    if len(text) > MAX_LOG_VALUE_CHARS:
        return text[:MAX_LOG_VALUE_CHARS] + f"...(+{len(text) - MAX_LOG_VALUE_CHARS} chars)"
    return text


def render_log_kv(fields: Mapping[str, Any]) -> str:
    parts: list[str] = []
    for key, value in fields.items():
        if value is None:
            continue
        clean_key = str(key).strip()
        if not clean_key:
            continue
        parts.append(f"{clean_key}={_normalize_log_value(value)}")
    return " ".join(parts)


def log_browser_event(
    logger: logging.Logger,
    *,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update(fields)
    logger.log(level, "browser %s", render_log_kv(payload))


def log_tool_event(
    logger: logging.Logger,
    *,
    level: int,
    tool: str,
    event: str,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"tool": tool, "event": event}
    payload.update(fields)
    logger.log(level, "tool %s", render_log_kv(payload))
