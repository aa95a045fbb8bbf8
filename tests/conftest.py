"""Shared fakes: a scripted CDP page and a launcher that never spawns Chrome."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest

from mcp_servers.rod import browser_page
from mcp_servers.rod.config import RodConfig
from mcp_servers.rod.launcher import LaunchResult
from mcp_servers.rod.session_manager import SessionManager

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
_QUERY_PREFIX = "document.querySelector("


class FakeCdpConnection:
    """Answers the CDP commands the page facade sends, backed by a dict DOM."""

    def __init__(self, ws_url: str = "ws://fake/devtools/page/T1", timeout: float = 5.0) -> None:
        self.ws_url = ws_url
        self.timeout = timeout
        self.calls: list[tuple[str, dict[str, Any] | None]] = []
        self.elements: dict[str, dict[str, Any]] = {}
        self.eval_results: dict[str, dict[str, Any]] = {}
        self.nav_errors: dict[str, str] = {}
        self.fire_load = True
        self.pending_events: list[str] = []
        self.focused: str | None = None
        self.closed = False
        self.fail_on: dict[str, Exception] = {}

    def add_element(
        self,
        selector: str,
        *,
        attrs: dict[str, str] | None = None,
        text: str = "",
        value: str | None = None,
        box: dict[str, float] | None = None,
    ) -> dict[str, Any]:
        el = {
            "attrs": dict(attrs or {}),
            "text": text,
            "value": value,
            "box": box or {"x": 50.0, "y": 20.0, "width": 100.0, "height": 40.0},
        }
        self.elements[selector] = el
        return el

    def methods(self) -> list[str]:
        return [m for m, _ in self.calls]

    def send(self, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None) -> dict[str, Any]:
        self.calls.append((method, params))
        if method in self.fail_on:
            raise self.fail_on[method]
        params = params or {}

        if method == "Target.createTarget":
            return {"targetId": "T1"}
        if method == "Page.navigate":
            url = params["url"]
            if url in self.nav_errors:
                return {"frameId": "F1", "errorText": self.nav_errors[url]}
            if self.fire_load:
                self.pending_events.append("Page.loadEventFired")
            return {"frameId": "F1", "loaderId": "L1"}
        if method == "Runtime.evaluate":
            return self._evaluate(params["expression"])
        if method == "Runtime.callFunctionOn":
            return self._call_function(params)
        if method == "Input.insertText":
            if self.focused is not None:
                el = self.elements[self.focused]
                if el.get("selected"):
                    el["value"] = params["text"]
                    el["selected"] = False
                else:
                    el["value"] = (el.get("value") or "") + params["text"]
            return {}
        if method == "Page.getLayoutMetrics":
            return {"cssContentSize": {"x": 0, "y": 0, "width": 1280, "height": 4000}}
        if method == "Page.captureScreenshot":
            return {"data": base64.b64encode(PNG_BYTES).decode()}
        return {}

    def _evaluate(self, expression: str) -> dict[str, Any]:
        if expression.startswith(_QUERY_PREFIX):
            selector = json.loads(expression[len(_QUERY_PREFIX) : -1])
            if selector.startswith("!!"):
                return {
                    "result": {"type": "object", "subtype": "error"},
                    "exceptionDetails": {"exception": {"description": f"SyntaxError: '{selector}' is not valid"}},
                }
            if selector in self.elements:
                return {"result": {"type": "object", "subtype": "node", "objectId": f"obj:{selector}"}}
            return {"result": {"type": "object", "subtype": "null", "value": None}}
        if expression in self.eval_results:
            return self.eval_results[expression]
        return {"result": {"type": "undefined"}}

    def _call_function(self, params: dict[str, Any]) -> dict[str, Any]:
        selector = params["objectId"].split(":", 1)[1]
        el = self.elements[selector]
        fn = params["functionDeclaration"]
        if "getAttribute" in fn:
            name = params["arguments"][0]["value"]
            if name in el["attrs"]:
                return {"result": {"type": "string", "value": el["attrs"][name]}}
            return {"result": {"type": "object", "subtype": "null", "value": None}}
        if "getBoundingClientRect" in fn:
            return {"result": {"type": "object", "value": el["box"]}}
        if "innerText" in fn:
            text = el["value"] if el.get("value") is not None else el["text"]
            return {"result": {"type": "string", "value": text}}
        if "this.focus()" in fn:
            self.focused = selector
            el["selected"] = True
            return {"result": {"type": "undefined"}}
        return {"result": {"type": "undefined"}}

    def wait_for_event(self, event_name: str, timeout: float = 10.0) -> dict[str, Any] | None:
        self.calls.append(("wait:" + event_name, {"timeout": timeout}))
        if event_name in self.pending_events:
            self.pending_events.remove(event_name)
            return {"timestamp": 1.0}
        return None

    def discard_events(self, event_name: str) -> int:
        before = len(self.pending_events)
        self.pending_events = [e for e in self.pending_events if e != event_name]
        return before - len(self.pending_events)

    def close(self) -> None:
        self.closed = True


class FakeLauncher:
    def __init__(self, *, fail_message: str | None = None) -> None:
        self.fail_message = fail_message
        self.launches = 0
        self.stops = 0
        self.running = False

    def ensure_running(self, timeout: float | None = None) -> LaunchResult:
        if self.fail_message:
            return LaunchResult(["chrome"], False, self.fail_message)
        self.launches += 1
        self.running = True
        return LaunchResult(["chrome"], True, "Chrome launched")

    def is_running(self) -> bool:
        return self.running

    def browser_ws_url(self) -> str:
        return "ws://127.0.0.1:9222/devtools/browser/B1"

    def list_targets(self) -> list[dict]:
        return []

    def stop(self, *, timeout: float = 2.0) -> bool:
        self.stops += 1
        self.running = False
        return True


@pytest.fixture(autouse=True)
def _fast_polling(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(browser_page, "POLL_INTERVAL", 0.01)


@pytest.fixture
def rod_config(tmp_path: Path) -> RodConfig:
    return RodConfig(
        binary_path="/usr/bin/chromium",
        profile_path=str(tmp_path / "profile"),
        screenshot_dir=str(tmp_path / "rod-screenshots"),
        default_timeout=0.2,
    )


@pytest.fixture
def page_conn() -> FakeCdpConnection:
    return FakeCdpConnection()


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def connections() -> list[FakeCdpConnection]:
    return []


@pytest.fixture
def session_manager(
    rod_config: RodConfig,
    fake_launcher: FakeLauncher,
    page_conn: FakeCdpConnection,
    connections: list[FakeCdpConnection],
) -> SessionManager:
    def connect(url: str, timeout: float) -> FakeCdpConnection:
        conn = page_conn if "/devtools/page/" in url else FakeCdpConnection(url, timeout)
        connections.append(conn)
        return conn

    return SessionManager(rod_config, fake_launcher, connect=connect)  # type: ignore[arg-type]
