"""
Browser automation tools organized by domain.

Each module provides focused functionality:
- args: validated argument records, one per tool
- base: ToolOutcome, driver error wrapping, element resolution
- navigation: page navigation
- dom: click, attribute/text reads, fill, wait
- page: screenshots and script evaluation
"""

from .args import (
    ClickArgs,
    EvalArgs,
    FillArgs,
    GetAttributeArgs,
    GetTextArgs,
    NavigateArgs,
    ScreenshotArgs,
    ToolArgs,
    WaitForArgs,
)
from .base import ToolOutcome, driver_errors, format_js_value, resolve_element
from .dom import click, fill, get_attribute, get_text, wait_for
from .navigation import navigate_to
from .page import eval_js, screenshot

__all__ = [
    "ClickArgs",
    "EvalArgs",
    "FillArgs",
    "GetAttributeArgs",
    "GetTextArgs",
    "NavigateArgs",
    "ScreenshotArgs",
    "ToolArgs",
    "WaitForArgs",
    "ToolOutcome",
    "driver_errors",
    "format_js_value",
    "resolve_element",
    "click",
    "fill",
    "get_attribute",
    "get_text",
    "wait_for",
    "navigate_to",
    "eval_js",
    "screenshot",
]
