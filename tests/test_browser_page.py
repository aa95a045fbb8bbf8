from __future__ import annotations

import pytest

from mcp_servers.rod.browser_page import BrowserPage, is_function_source
from mcp_servers.rod.errors import CdpError, ElementNotFound

from conftest import PNG_BYTES, FakeCdpConnection


@pytest.fixture
def page(page_conn: FakeCdpConnection) -> BrowserPage:
    return BrowserPage(page_conn, "T1", default_timeout=0.2)


@pytest.mark.parametrize(
    ("script", "expected"),
    [
        ("() => document.title", True),
        ("async () => 1", True),
        ("function() { return 1 }", True),
        ("x => x", True),
        ("document.title", False),
        ("(1 + 2)", False),
        ("", False),
    ],
)
def test_is_function_source(script: str, expected: bool) -> None:
    assert is_function_source(script) is expected


def test_timeout_override_restores_on_error(page: BrowserPage) -> None:
    assert page.timeout == 0.2
    with pytest.raises(RuntimeError):
        with page.timeout_override(5):
            assert page.timeout == 5.0
            raise RuntimeError("boom")
    assert page.timeout == 0.2


def test_timeout_override_nests(page: BrowserPage) -> None:
    with page.timeout_override(3):
        with page.timeout_override(1):
            assert page.timeout == 1.0
        assert page.timeout == 3.0
    assert page.timeout == 0.2


def test_navigate_waits_for_load_with_page_timeout(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page.navigate("http://localhost:8080")
    assert page.url == "http://localhost:8080"
    assert ("wait:Page.loadEventFired", {"timeout": 0.2}) in page_conn.calls


def test_navigate_ignores_stale_load_event(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.pending_events.append("Page.loadEventFired")
    page_conn.fire_load = False
    with pytest.raises(CdpError, match="page load did not complete"):
        page.navigate("http://localhost:8080")


def test_navigate_reports_error_text(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.nav_errors["http://x.invalid"] = "net::ERR_NAME_NOT_RESOLVED"
    with pytest.raises(CdpError, match="ERR_NAME_NOT_RESOLVED"):
        page.navigate("http://x.invalid")
    assert page.url == "about:blank"


def test_element_polls_until_timeout(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    with pytest.raises(ElementNotFound) as excinfo:
        page.element("#missing")
    assert excinfo.value.selector == "#missing"
    assert excinfo.value.message == "element not found: #missing"
    assert page_conn.methods().count("Runtime.evaluate") > 1


def test_invalid_selector_is_driver_error(page: BrowserPage) -> None:
    with pytest.raises(CdpError, match="invalid selector"):
        page.element("!!bad[")


def test_element_reads(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.add_element("a.link", attrs={"href": "/home"}, text="Home")
    page_conn.add_element("input#q", value="typed")
    link = page.element("a.link")
    assert link.attribute("href") == "/home"
    assert link.attribute("target") is None
    assert link.text() == "Home"
    assert page.element("input#q").text() == "typed"


def test_click_without_box_fails(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.add_element("#hidden", box={"x": 0.0, "y": 0.0, "width": 0.0, "height": 0.0})
    with pytest.raises(CdpError, match="no visible box"):
        page.element("#hidden").click()
    assert "Input.dispatchMouseEvent" not in page_conn.methods()


def test_eval_js_uses_longer_of_connection_and_page_timeout(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.eval_results["1 + 1"] = {"result": {"type": "number", "value": 2}}
    seen: dict = {}
    original = page_conn.send

    def spy(method, params=None, *, timeout=None):
        seen[method] = timeout
        return original(method, params, timeout=timeout)

    page_conn.send = spy  # type: ignore[method-assign]
    assert page.eval_js("1 + 1") == 2
    assert seen["Runtime.evaluate"] == page_conn.timeout


def test_viewport_screenshot(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    assert page.screenshot() == PNG_BYTES
    params = [p for m, p in page_conn.calls if m == "Page.captureScreenshot"][0]
    assert params == {"format": "png", "fromSurface": True}


def test_empty_screenshot_fails(page: BrowserPage, page_conn: FakeCdpConnection) -> None:
    page_conn.fail_on["Page.captureScreenshot"] = CdpError("Screenshot data is empty")
    with pytest.raises(CdpError, match="empty"):
        page.screenshot(full_page=True)
