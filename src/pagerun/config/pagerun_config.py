#!/usr/bin/env python
# coding=utf-8
"""
This module contains the runtime configuration of pagerun.

Values come from three places, lowest precedence first:
dataclass defaults, a YAML/JSON config file, and PAGERUN_* environment
variables (a local .env file is loaded first).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from pagerun.util.file_utils import from_json_or_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "PAGERUN_"
DEFAULT_TIMEOUT_MS = 30_000


def _parse_bool(raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(raw: Any, default: int, minimum: int) -> int:
    if raw is None:
        return max(minimum, int(default))
    try:
        parsed = int(str(raw).strip())
    except ValueError:
        return max(minimum, int(default))
    return max(minimum, parsed)


def _parse_list(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    else:
        items = list(raw)
    return [str(item).strip() for item in items if str(item).strip()]


def _parse_optional_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


@dataclass
class PagerunConfig:
    headless: bool = field(
        default=True,
        metadata={"help": "Run the browser without a visible window."},
    )
    browser_channel: Optional[str] = field(
        default=None,
        metadata={"help": "Installed browser channel to launch (e.g. chrome, msedge)."},
    )
    executable_path: Optional[str] = field(
        default=None,
        metadata={"help": "Explicit browser executable; wins over browser_channel."},
    )
    default_timeout_ms: int = field(
        default=DEFAULT_TIMEOUT_MS,
        metadata={"help": "Default Playwright action/navigation timeout in milliseconds."},
    )
    capabilities: List[str] = field(
        default_factory=list,
        metadata={"help": "Extra tool capabilities to enable beyond core (e.g. vision, pdf)."},
    )
    include_snapshots: bool = field(
        default=True,
        metadata={"help": "Attach a page snapshot when a tool asks for one."},
    )
    trace_actions: bool = field(
        default=True,
        metadata={"help": "Record page events on the tab's action tracer."},
    )
    log_level: str = field(
        default="INFO",
        metadata={"help": "Root log level."},
    )

    # Parsing _____________________________________________________________

    _PARSERS = {
        "headless": lambda raw, cur: _parse_bool(raw, cur),
        "browser_channel": lambda raw, cur: _parse_optional_str(raw),
        "executable_path": lambda raw, cur: _parse_optional_str(raw),
        "default_timeout_ms": lambda raw, cur: _parse_int(raw, cur, 0),
        "capabilities": lambda raw, cur: _parse_list(raw),
        "include_snapshots": lambda raw, cur: _parse_bool(raw, cur),
        "trace_actions": lambda raw, cur: _parse_bool(raw, cur),
        "log_level": lambda raw, cur: str(raw).strip().upper() or cur,
    }

    def updated(self, values: Dict[str, Any]) -> "PagerunConfig":
        """Return a copy with known keys from ``values`` parsed and applied."""
        changes: Dict[str, Any] = {}
        for item in fields(self):
            if item.name not in values:
                continue
            parser = self._PARSERS[item.name]
            changes[item.name] = parser(values[item.name], getattr(self, item.name))
        unknown = set(values) - {item.name for item in fields(self)}
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", sorted(unknown))
        return replace(self, **changes)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PagerunConfig":
        data = from_json_or_yaml(path)
        section = data["pagerun"] if "pagerun" in data else data
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ValueError(f"The 'pagerun' section in {path} must be a mapping")
        return cls().updated(section)

    @classmethod
    def from_env(cls, base: Optional["PagerunConfig"] = None) -> "PagerunConfig":
        load_dotenv()
        base = base or cls()
        values: Dict[str, Any] = {}
        for item in fields(cls):
            raw = os.getenv(ENV_PREFIX + item.name.upper())
            if raw is not None:
                values[item.name] = raw
        return base.updated(values)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "PagerunConfig":
        """File values (when given) overridden by environment variables."""
        base = cls.from_file(path) if path else cls()
        return cls.from_env(base)

    def as_dict(self) -> Dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}
