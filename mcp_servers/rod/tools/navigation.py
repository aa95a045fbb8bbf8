"""
Navigation tools for browser automation.
"""

from __future__ import annotations

from ..browser_page import BrowserPage
from .args import NavigateArgs
from .base import ToolOutcome, driver_errors


def navigate_to(page: BrowserPage, args: NavigateArgs) -> ToolOutcome:
    """Load args.url and block until the page reports load completion."""
    with driver_errors():
        page.navigate(args.url)
    return ToolOutcome(f"Successfully navigated to {args.url}", {"url": args.url})
