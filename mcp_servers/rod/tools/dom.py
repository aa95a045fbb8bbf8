"""
Element tools: click, read attribute/text, fill, wait.

Every tool resolves its selector against the current page first; a missing
element is reported as ElementNotFound and never replaced by another match.
"""

from __future__ import annotations

from ..browser_page import BrowserPage
from ..errors import ElementNotFound
from .args import ClickArgs, FillArgs, GetAttributeArgs, GetTextArgs, WaitForArgs
from .base import ToolOutcome, driver_errors, resolve_element


def click(page: BrowserPage, args: ClickArgs) -> ToolOutcome:
    """Single left-button click at the element's current position."""
    with resolve_element(page, args.selector) as element, driver_errors():
        element.click(button="left", click_count=1)
    return ToolOutcome(f"Successfully clicked {args.selector}", {"selector": args.selector})


def get_attribute(page: BrowserPage, args: GetAttributeArgs) -> ToolOutcome:
    with resolve_element(page, args.selector) as element, driver_errors():
        value = element.attribute(args.attribute)

    data = {"selector": args.selector, "attribute": args.attribute, "value": value, "found": value is not None}
    # An absent attribute is an answer, not a failure.
    if value is None:
        return ToolOutcome(f"Attribute '{args.attribute}' not found on {args.selector}", data)
    return ToolOutcome(f"Attribute '{args.attribute}' on {args.selector} = '{value}'", data)


def get_text(page: BrowserPage, args: GetTextArgs) -> ToolOutcome:
    with resolve_element(page, args.selector) as element, driver_errors():
        text = element.text()
    return ToolOutcome(f"Text content of {args.selector}: '{text}'", {"selector": args.selector, "text": text})


def wait_for(page: BrowserPage, args: WaitForArgs) -> ToolOutcome:
    """Resolve the selector once under a temporary page timeout."""
    with page.timeout_override(args.timeout):
        try:
            resolve_element(page, args.selector).release()
        except ElementNotFound as exc:
            raise ElementNotFound(
                args.selector,
                f"element {args.selector} did not appear within {args.timeout:g} seconds",
            ) from exc
    return ToolOutcome(f"Element {args.selector} appeared", {"selector": args.selector, "timeout": args.timeout})


def fill(page: BrowserPage, args: FillArgs) -> ToolOutcome:
    """Replace the element's content: select everything first, then type."""
    with resolve_element(page, args.selector) as element, driver_errors():
        element.select_all_text()
        element.input(args.text)
    return ToolOutcome(f"Filled {args.selector} with '{args.text}'", {"selector": args.selector, "text": args.text})
