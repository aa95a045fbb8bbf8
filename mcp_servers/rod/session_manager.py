"""
Lifecycle of the single browser session owned by the server process.

The session is created on the first tool call that needs it and released
once when the server exits. A failed creation leaves nothing behind, so the
next call starts over from scratch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .browser_page import BrowserPage
from .config import RodConfig
from .errors import SessionError
from .launcher import BrowserLauncher
from .session_cdp import CdpConnection

logger = logging.getLogger("mcp.rod.session")

ConnectFunc = Callable[[str, float], CdpConnection]


def _page_ws_from_browser_ws(browser_ws: str, target_id: str) -> str:
    # ws://127.0.0.1:<port>/devtools/browser/<id> -> ws://127.0.0.1:<port>/devtools/page/<target>
    head, sep, _ = browser_ws.partition("/devtools/")
    if not sep:
        raise SessionError(f"Unexpected browser WebSocket URL: {browser_ws}")
    return f"{head}/devtools/page/{target_id}"


class SessionManager:
    """Owns at most one browser connection and one page."""

    def __init__(
        self,
        config: RodConfig,
        launcher: BrowserLauncher | None = None,
        *,
        connect: ConnectFunc | None = None,
    ) -> None:
        self.config = config
        self.launcher = launcher or BrowserLauncher(config)
        self._connect: ConnectFunc = connect or (lambda url, timeout: CdpConnection(url, timeout=timeout))
        self._browser_conn: Any = None
        self._page: BrowserPage | None = None
        self.created_count = 0

    @property
    def is_active(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> BrowserPage | None:
        return self._page

    def ensure(self) -> BrowserPage:
        """Return the live page, launching the browser on first use."""
        if self._page is not None:
            if self.launcher.is_running():
                return self._page
            logger.warning("browser process gone; recreating session")
            self.teardown()

        browser_conn: Any = None
        page_conn: Any = None
        target_id: str | None = None
        try:
            launch = self.launcher.ensure_running()
            if not (launch.started or self.launcher.is_running()):
                raise SessionError(launch.message)

            browser_ws = self.launcher.browser_ws_url()
            browser_conn = self._connect(browser_ws, self.config.cdp_timeout)

            created = browser_conn.send("Target.createTarget", {"url": "about:blank"})
            target_id = created.get("targetId")
            if not target_id:
                raise SessionError("Failed to create browser page")

            page_conn = self._connect(self._page_ws_url(browser_ws, target_id), self.config.cdp_timeout)
            page = BrowserPage(page_conn, target_id, default_timeout=self.config.default_timeout)
            page.enable_domains()
        except Exception as exc:
            logger.warning("session_create_failed: %s", exc)
            if page_conn is not None:
                self._guarded("close page connection", page_conn.close)
            if browser_conn is not None:
                if target_id:
                    self._guarded(
                        "close page target",
                        lambda: browser_conn.send("Target.closeTarget", {"targetId": target_id}),
                    )
                self._guarded("close browser connection", browser_conn.close)
            self._guarded("stop browser", self.launcher.stop)
            if isinstance(exc, SessionError):
                raise
            raise SessionError(str(exc)) from exc

        self._browser_conn = browser_conn
        self._page = page
        self.created_count += 1
        logger.info("session_created target=%s", target_id)
        return page

    def _page_ws_url(self, browser_ws: str, target_id: str) -> str:
        for target in self.launcher.list_targets():
            if target.get("id") == target_id and target.get("webSocketDebuggerUrl"):
                return target["webSocketDebuggerUrl"]
        return _page_ws_from_browser_ws(browser_ws, target_id)

    def teardown(self) -> None:
        """Close the page, then the browser; each step runs even if an earlier one fails."""
        page, self._page = self._page, None
        browser_conn, self._browser_conn = self._browser_conn, None

        if page is not None:
            if browser_conn is not None:
                self._guarded(
                    "close page target",
                    lambda: browser_conn.send("Target.closeTarget", {"targetId": page.target_id}),
                )
            self._guarded("close page connection", page.close)
        if browser_conn is not None:
            self._guarded("close browser connection", browser_conn.close)
        self._guarded("stop browser", self.launcher.stop)

    @staticmethod
    def _guarded(step: str, func: Callable[[], Any]) -> None:
        try:
            func()
        except Exception as exc:
            logger.warning("cleanup step failed (%s): %s", step, exc)


__all__ = ["SessionManager"]
