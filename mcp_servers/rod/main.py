"""
MCP server exposing rod_* browser tools over stdio.

This module provides the main entry point and protocol handling.
Tool dispatch is handled via registry pattern in server/registry.py.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

from .config import RodConfig
from .errors import METHOD_NOT_FOUND, InvalidParams, RodError
from .server.contract import (
    DEFAULT_PROTOCOL_VERSION,
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    initialize_result,
    select_protocol,
    tools_list,
)
from .server.redaction import redact_jsonrpc_for_log, redact_tool_arguments
from .server.registry import create_default_registry
from .server.types import RpcError, ToolResult
from .session_manager import SessionManager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("mcp.rod")

__all__ = [
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LATEST_PROTOCOL_VERSION",
    "DEFAULT_PROTOCOL_VERSION",
    "McpServer",
    "main",
    "serve",
]


_dump_warned = False


def _dump_frame(marker: bytes, payload: dict[str, Any]) -> None:
    """Append a redacted copy of a frame to MCP_DUMP_FRAMES; I/O errors never reach the loop."""
    global _dump_warned
    dump_path = os.environ.get("MCP_DUMP_FRAMES")
    if not dump_path:
        return
    safe = redact_jsonrpc_for_log(payload)
    try:
        if dump_dir := os.path.dirname(dump_path):
            os.makedirs(dump_dir, exist_ok=True)
        with open(dump_path, "ab") as fp:
            fp.write(marker)
            fp.write((json.dumps(safe, ensure_ascii=False) + "\n").encode())
    except OSError as exc:
        if not _dump_warned:
            _dump_warned = True
            logger.warning("frame dump to %s failed: %s", dump_path, exc)


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    data = json.dumps(payload, ensure_ascii=False)
    _dump_frame(b"--out--\n", payload)
    sys.stdout.buffer.write((data + "\n").encode())
    sys.stdout.buffer.flush()


def _read_message() -> dict[str, Any] | None:
    """Read the next JSON-RPC message from stdin; None at end of stream.

    Blank lines, undecodable lines and non-object values are skipped.
    """
    while True:
        line = sys.stdin.buffer.readline()
        if not line:
            return None
        line = line.strip()
        if not line:
            continue
        try:
            msg = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("skipping malformed frame: %s", exc)
            continue
        if not isinstance(msg, dict):
            logger.warning("skipping non-object frame: %s", type(msg).__name__)
            continue
        if os.environ.get("MCP_TRACE"):
            logger.info("recv %s", redact_jsonrpc_for_log(msg))
        _dump_frame(b"--in--\n", msg)
        return msg


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(self, config: RodConfig | None = None, session: SessionManager | None = None) -> None:
        self.config = config or RodConfig.from_env()
        self.session = session or SessionManager(self.config)
        self.registry = create_default_registry()
        self._closed = False

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        """Handle initialize request."""
        requested = params.get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(protocol)})

    def handle_list_tools(self, request_id: Any) -> None:
        """Handle tools/list request."""
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def _log_call(self, name: str, arguments: dict[str, Any]) -> None:
        """Log tool call with sanitized arguments."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """Run one tool; every failure comes back as an error result."""
        self._log_call(name, arguments)
        try:
            return self.registry.dispatch(name, self.config, self.session, arguments)
        except RodError as e:
            logger.info("tool_error tool=%s code=%s reason=%s", name, e.code, e.message)
            return ToolResult.failure(e)
        except Exception as exc:
            logger.exception("tool_call_failed")
            return ToolResult.failure(exc)

    def handle_call_tool(self, request_id: Any, name: str, arguments: dict[str, Any]) -> None:
        """Handle tools/call request."""
        result = self.call_tool(name, arguments)
        _write_message(result.to_response(request_id))

    def _handle_invalid_params(self, request_id: Any, message: str) -> None:
        error = RpcError.from_exception(InvalidParams(f"Invalid params: {message}"))
        _write_message({"jsonrpc": "2.0", "id": request_id, "error": error.to_dict()})

    def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        if not message:
            return

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params")

        # Notifications carry no id and get no response.
        if isinstance(method, str) and method.startswith("notifications/") and "id" not in message:
            logger.debug("notification %s", method)
            return

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "tools/list":
            self.handle_list_tools(request_id)
        elif method == "tools/call":
            if params is not None and not isinstance(params, dict):
                self._handle_invalid_params(request_id, "params must be an object")
                return
            params = params or {}
            name = params.get("name")
            arguments = params.get("arguments")
            if not isinstance(name, str):
                self._handle_invalid_params(request_id, "name must be a string")
            elif arguments is not None and not isinstance(arguments, dict):
                self._handle_invalid_params(request_id, "arguments must be an object")
            else:
                self.handle_call_tool(request_id, name, arguments or {})
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        else:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": METHOD_NOT_FOUND, "message": f"Method not found: {method}"},
                }
            )

    def shutdown(self) -> None:
        """Release the browser session; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.session.teardown()


def serve(server: McpServer) -> None:
    """Process requests one at a time until stdin is exhausted."""
    while True:
        message = _read_message()
        if message is None:
            break
        server.dispatch(message)


def main() -> None:
    """Main entry point for MCP server."""
    server = McpServer()
    try:
        serve(server)
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
