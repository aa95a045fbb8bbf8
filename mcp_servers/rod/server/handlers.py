"""
Tool handlers.

All handlers follow the signature: (page, config, args) -> ToolOutcome, where
`args` is the tool's already-validated argument record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import tools
from ..tools.args import (
    ClickArgs,
    EvalArgs,
    FillArgs,
    GetAttributeArgs,
    GetTextArgs,
    NavigateArgs,
    ScreenshotArgs,
    WaitForArgs,
)
from .types import ToolSpec

if TYPE_CHECKING:
    from ..browser_page import BrowserPage
    from ..config import RodConfig
    from ..tools.base import ToolOutcome


def handle_rod_navigate(page: BrowserPage, config: RodConfig, args: NavigateArgs) -> ToolOutcome:
    return tools.navigate_to(page, args)


def handle_rod_click(page: BrowserPage, config: RodConfig, args: ClickArgs) -> ToolOutcome:
    return tools.click(page, args)


def handle_rod_screenshot(page: BrowserPage, config: RodConfig, args: ScreenshotArgs) -> ToolOutcome:
    return tools.screenshot(page, args, config.screenshot_dir)


def handle_rod_get_attribute(page: BrowserPage, config: RodConfig, args: GetAttributeArgs) -> ToolOutcome:
    return tools.get_attribute(page, args)


def handle_rod_get_text(page: BrowserPage, config: RodConfig, args: GetTextArgs) -> ToolOutcome:
    return tools.get_text(page, args)


def handle_rod_wait_for(page: BrowserPage, config: RodConfig, args: WaitForArgs) -> ToolOutcome:
    return tools.wait_for(page, args)


def handle_rod_eval(page: BrowserPage, config: RodConfig, args: EvalArgs) -> ToolOutcome:
    return tools.eval_js(page, args)


def handle_rod_fill(page: BrowserPage, config: RodConfig, args: FillArgs) -> ToolOutcome:
    return tools.fill(page, args)


ROD_HANDLERS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec("rod_navigate", NavigateArgs.parse, handle_rod_navigate),
        ToolSpec("rod_click", ClickArgs.parse, handle_rod_click),
        ToolSpec("rod_screenshot", ScreenshotArgs.parse, handle_rod_screenshot),
        ToolSpec("rod_get_attribute", GetAttributeArgs.parse, handle_rod_get_attribute),
        ToolSpec("rod_get_text", GetTextArgs.parse, handle_rod_get_text),
        ToolSpec("rod_wait_for", WaitForArgs.parse, handle_rod_wait_for),
        ToolSpec("rod_eval", EvalArgs.parse, handle_rod_eval),
        ToolSpec("rod_fill", FillArgs.parse, handle_rod_fill),
    )
}
