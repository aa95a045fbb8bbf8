"""
Page-wide tools: screenshot capture and script evaluation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..browser_page import BrowserPage
from ..errors import ToolExecutionError
from .args import EvalArgs, ScreenshotArgs
from .base import ToolOutcome, driver_errors, format_js_value

logger = logging.getLogger("mcp.rod.tools")


def screenshot(page: BrowserPage, args: ScreenshotArgs, output_dir: str | Path) -> ToolOutcome:
    """Capture the page and write it to <output_dir>/<filename>."""
    # Only the base name is honoured so a caller cannot write outside output_dir.
    name = Path(args.filename).name
    if not name or name in {".", ".."}:
        raise ToolExecutionError(f"invalid screenshot filename: {args.filename!r}")

    with driver_errors():
        data = page.screenshot(full_page=args.full_page)

    out_dir = Path(output_dir)
    path = out_dir / name
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ToolExecutionError(f"failed to write screenshot {path}: {exc}") from exc

    logger.info("screenshot saved path=%s bytes=%d full_page=%s", path, len(data), args.full_page)
    return ToolOutcome(
        f"Screenshot saved to {path}",
        {"path": str(path), "bytes": len(data), "fullPage": args.full_page},
    )


def eval_js(page: BrowserPage, args: EvalArgs) -> ToolOutcome:
    """Run the script in the page context and report its value, whatever its type."""
    with driver_errors():
        value = page.eval_js(args.script)
    return ToolOutcome(f"JavaScript result: {format_js_value(value)}", {"value": value})
