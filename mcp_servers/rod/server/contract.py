"""Protocol and tool contract definitions.

This is the single source of truth for:
- supported MCP protocol versions
- server identity
- capabilities advertised by initialize
- tool list
"""

from __future__ import annotations

from typing import Any

from .definitions import get_all_tool_definitions

SERVER_INFO: dict[str, str] = {"name": "rod-mcp-server", "version": "1.0.0"}

SUPPORTED_PROTOCOL_VERSIONS = ["2024-11-05", "2025-03-26", "2025-06-18"]
DEFAULT_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]

CAPABILITIES: dict[str, Any] = {"tools": {}}


def select_protocol(requested: Any) -> str:
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return DEFAULT_PROTOCOL_VERSION


def initialize_result(protocol: str) -> dict[str, Any]:
    return {
        "protocolVersion": protocol,
        "capabilities": {k: dict(v) for k, v in CAPABILITIES.items()},
        "serverInfo": dict(SERVER_INFO),
    }


def tools_list() -> list[dict[str, Any]]:
    return get_all_tool_definitions()
