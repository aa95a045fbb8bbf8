"""
Base utilities for browser automation tools.

Provides:
- ToolOutcome: normalized tool result (text for the wire, data for callers)
- driver_errors: wraps driver failures into ToolExecutionError
- resolve_element: selector lookup bounded by the page timeout
"""

from __future__ import annotations

import json
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from ..browser_page import BrowserPage, PageElement
from ..errors import CdpError, ToolExecutionError


@dataclass(slots=True)
class ToolOutcome:
    """What a tool did: one human-readable line plus the structured values behind it."""

    text: str
    data: dict[str, Any] = field(default_factory=dict)


@contextmanager
def driver_errors() -> Generator[None, None, None]:
    """Re-raise driver failures as tool execution errors, message unchanged."""
    try:
        yield
    except CdpError as exc:
        raise ToolExecutionError(exc.message) from exc


def resolve_element(page: BrowserPage, selector: str) -> PageElement:
    with driver_errors():
        return page.element(selector)


def format_js_value(value: Any) -> str:
    """Render a JavaScript value the way it reads in a console."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(value)
