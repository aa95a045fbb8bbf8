"""
Error taxonomy for the rod MCP server.

Every failure that can reach the protocol boundary is a RodError carrying
the JSON-RPC code it maps to. The dispatcher never inspects messages,
only codes.
"""

from __future__ import annotations

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RodError(Exception):
    """Base class for errors surfaced to the MCP client."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class CdpError(RodError):
    """Transport or protocol failure talking to Chrome DevTools."""


class SessionError(RodError):
    """The browser or its page could not be created."""


class InvalidParams(RodError):
    """The tools/call payload itself is malformed."""

    code = INVALID_PARAMS


class UnknownTool(RodError):
    code = METHOD_NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolError(RodError):
    """Failure raised from inside a tool."""


class InvalidArguments(ToolError):
    code = INVALID_PARAMS

    def __init__(self, field: str, expected: str) -> None:
        super().__init__(f"{field} must be a {expected}")
        self.field = field
        self.expected = expected


class ElementNotFound(ToolError):
    def __init__(self, selector: str, message: str | None = None) -> None:
        super().__init__(message or f"element not found: {selector}")
        self.selector = selector


class ToolExecutionError(ToolError):
    """Driver failure wrapped with its message unchanged."""


__all__ = [
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "RodError",
    "CdpError",
    "SessionError",
    "InvalidParams",
    "UnknownTool",
    "ToolError",
    "InvalidArguments",
    "ElementNotFound",
    "ToolExecutionError",
]
