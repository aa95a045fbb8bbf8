"""
Page-level browser operations over CDP.

BrowserPage is the driver facade the tools act on: navigation, element
lookup by CSS selector, element reads and input, script evaluation and
screenshots. Every call blocks until Chrome answers or a timeout expires.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from .errors import CdpError, ElementNotFound
from .session_cdp import CdpConnection

logger = logging.getLogger("mcp.rod.page")

POLL_INTERVAL = 0.1

_FUNCTION_RE = re.compile(r"^\s*(?:async\s+)?(?:function\b|\([^()]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)")

_SCROLL_AND_MEASURE_JS = """function() {
    try {
        this.scrollIntoView({ behavior: 'instant', block: 'center', inline: 'center' });
    } catch (e) {
        // ignore
    }
    const r = this.getBoundingClientRect();
    return { x: r.left + r.width / 2, y: r.top + r.height / 2, width: r.width, height: r.height };
}"""

_GET_ATTRIBUTE_JS = "function(name) { return this.getAttribute(name); }"

_GET_TEXT_JS = """function() {
    switch (this.tagName) {
        case 'INPUT':
        case 'TEXTAREA':
            return this.value;
        case 'SELECT':
            return Array.from(this.selectedOptions).map((o) => o.innerText).join();
    }
    if (typeof this.innerText === 'string') return this.innerText;
    return this.textContent;
}"""

_SELECT_ALL_TEXT_JS = """function() {
    this.focus();
    if (typeof this.select === 'function') {
        this.select();
        return;
    }
    const range = document.createRange();
    range.selectNodeContents(this);
    const selection = window.getSelection();
    selection.removeAllRanges();
    selection.addRange(range);
}"""


def is_function_source(script: str) -> bool:
    """True when the script is a function definition rather than an expression."""
    return bool(_FUNCTION_RE.match(script or ""))


def _exception_message(details: dict[str, Any]) -> str:
    exc = details.get("exception")
    if isinstance(exc, dict) and exc.get("description"):
        return str(exc["description"])
    return str(details.get("text") or "JavaScript exception")


def _remote_value(remote: dict[str, Any]) -> Any:
    # CDP reports undefined and null without a "value" field.
    if remote.get("type") == "undefined":
        return None
    if remote.get("type") == "object" and remote.get("subtype") == "null":
        return None
    if "value" in remote:
        return remote["value"]
    if "unserializableValue" in remote:
        return remote["unserializableValue"]
    return remote.get("description")


class PageElement:
    """A DOM element resolved in the page, addressed by its remote object id."""

    def __init__(self, page: BrowserPage, object_id: str, selector: str) -> None:
        self.page = page
        self.object_id = object_id
        self.selector = selector

    def call(self, function: str, *args: Any) -> Any:
        params: dict[str, Any] = {
            "objectId": self.object_id,
            "functionDeclaration": function,
            "returnByValue": True,
            "awaitPromise": True,
        }
        if args:
            params["arguments"] = [{"value": a} for a in args]
        result = self.page.conn.send("Runtime.callFunctionOn", params)
        if result.get("exceptionDetails"):
            raise CdpError(_exception_message(result["exceptionDetails"]))
        return _remote_value(result.get("result") or {})

    def click(self, button: str = "left", click_count: int = 1) -> None:
        """Scroll into view and click at the element's centre."""
        box = self.call(_SCROLL_AND_MEASURE_JS) or {}
        if not box.get("width") and not box.get("height"):
            raise CdpError(f"element {self.selector} has no visible box to click")
        self.page.click_at(float(box["x"]), float(box["y"]), button=button, click_count=click_count)

    def attribute(self, name: str) -> str | None:
        value = self.call(_GET_ATTRIBUTE_JS, name)
        return None if value is None else str(value)

    def text(self) -> str:
        value = self.call(_GET_TEXT_JS)
        return "" if value is None else str(value)

    def select_all_text(self) -> None:
        self.call(_SELECT_ALL_TEXT_JS)

    def input(self, text: str) -> None:
        """Type text into the focused element, replacing the current selection."""
        self.page.conn.send("Input.insertText", {"text": text})

    def release(self) -> None:
        """Drop the remote object handle; a failure here only leaks the handle."""
        try:
            self.page.conn.send("Runtime.releaseObject", {"objectId": self.object_id})
        except CdpError as exc:
            logger.debug("releaseObject failed for %s: %s", self.selector, exc)

    def __enter__(self) -> PageElement:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class BrowserPage:
    """
    The single page the session drives.

    `timeout` bounds load waits and element lookups. It is changed only
    through timeout_override(), which always puts the previous value back.
    """

    def __init__(self, conn: CdpConnection, target_id: str, *, default_timeout: float = 30.0) -> None:
        self.conn = conn
        self.target_id = target_id
        self.default_timeout = float(default_timeout)
        self._timeout: float | None = None
        self.url = "about:blank"

    @property
    def timeout(self) -> float:
        return self.default_timeout if self._timeout is None else self._timeout

    @contextmanager
    def timeout_override(self, seconds: float) -> Generator[BrowserPage, None, None]:
        """Temporarily bound page operations by `seconds`; restored on every exit path."""
        previous = self._timeout
        self._timeout = max(0.0, float(seconds))
        try:
            yield self
        finally:
            self._timeout = previous

    def enable_domains(self) -> None:
        for method in ("Page.enable", "Runtime.enable", "DOM.enable"):
            self.conn.send(method)

    def close(self) -> None:
        self.conn.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Navigation
    # ─────────────────────────────────────────────────────────────────────────

    def navigate(self, url: str) -> str:
        """Navigate to URL and wait for the load event."""
        # A load event left over from an earlier navigation must not satisfy this wait.
        self.conn.discard_events("Page.loadEventFired")
        result = self.conn.send("Page.navigate", {"url": url})
        if result.get("errorText"):
            raise CdpError(f"navigation to {url} failed: {result['errorText']}")
        # Same-document navigations (fragment changes) carry no loaderId and fire no load event.
        if result.get("loaderId"):
            self.wait_load()
        self.url = url
        return url

    def wait_load(self) -> None:
        timeout = self.timeout
        if self.conn.wait_for_event("Page.loadEventFired", timeout=timeout) is None:
            raise CdpError(f"page load did not complete within {timeout:g} seconds")

    # ─────────────────────────────────────────────────────────────────────────
    # Elements
    # ─────────────────────────────────────────────────────────────────────────

    def query_selector(self, selector: str) -> PageElement | None:
        """Single lookup attempt; None when nothing matches yet."""
        result = self.conn.send(
            "Runtime.evaluate",
            {"expression": f"document.querySelector({json.dumps(selector)})"},
        )
        if result.get("exceptionDetails"):
            raise CdpError(f"invalid selector {selector}: {_exception_message(result['exceptionDetails'])}")
        remote = result.get("result") or {}
        object_id = remote.get("objectId")
        if remote.get("subtype") == "null" or not object_id:
            return None
        return PageElement(self, object_id, selector)

    def element(self, selector: str) -> PageElement:
        """Resolve selector, retrying until the page timeout expires."""
        deadline = time.monotonic() + self.timeout
        while True:
            found = self.query_selector(selector)
            if found is not None:
                return found
            if time.monotonic() >= deadline:
                raise ElementNotFound(selector)
            time.sleep(POLL_INTERVAL)

    # ─────────────────────────────────────────────────────────────────────────
    # Input
    # ─────────────────────────────────────────────────────────────────────────

    def click_at(self, x: float, y: float, button: str = "left", click_count: int = 1) -> None:
        self.conn.send("Input.dispatchMouseEvent", {"type": "mouseMoved", "x": x, "y": y})
        for event_type in ("mousePressed", "mouseReleased"):
            self.conn.send(
                "Input.dispatchMouseEvent",
                {"type": event_type, "x": x, "y": y, "button": button, "clickCount": click_count},
            )

    # ─────────────────────────────────────────────────────────────────────────
    # JavaScript & screenshots
    # ─────────────────────────────────────────────────────────────────────────

    def eval_js(self, script: str) -> Any:
        """Evaluate script in the page and return its JSON value."""
        expression = f"({script})()" if is_function_source(script) else script
        result = self.conn.send(
            "Runtime.evaluate",
            {"expression": expression, "returnByValue": True, "awaitPromise": True},
            timeout=max(self.conn.timeout, self.timeout),
        )
        if result.get("exceptionDetails"):
            raise CdpError(_exception_message(result["exceptionDetails"]))
        return _remote_value(result.get("result") or {})

    def screenshot(self, full_page: bool = False) -> bytes:
        """Capture the page as PNG bytes, viewport only unless full_page."""
        params: dict[str, Any] = {"format": "png", "fromSurface": True}
        if full_page:
            metrics = self.conn.send("Page.getLayoutMetrics")
            size = metrics.get("cssContentSize") or metrics.get("contentSize") or {}
            width = float(size.get("width") or 0)
            height = float(size.get("height") or 0)
            if width > 0 and height > 0:
                params["clip"] = {"x": 0, "y": 0, "width": width, "height": height, "scale": 1}
            params["captureBeyondViewport"] = True
        result = self.conn.send("Page.captureScreenshot", params)
        data = result.get("data") or ""
        if not data:
            raise CdpError("Screenshot data is empty")
        return base64.b64decode(data)


__all__ = ["BrowserPage", "PageElement", "is_function_source"]
