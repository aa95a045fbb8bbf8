"""
Type definitions for MCP server responses and handlers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..errors import INTERNAL_ERROR, RodError, SessionError

if TYPE_CHECKING:
    from ..browser_page import BrowserPage
    from ..config import RodConfig
    from ..tools.base import ToolOutcome


@dataclass(slots=True, frozen=True)
class RpcError:
    """JSON-RPC error object."""

    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}

    @classmethod
    def from_exception(cls, exc: BaseException) -> RpcError:
        """Map any failure to its protocol code; the message text is kept as-is."""
        if isinstance(exc, SessionError):
            return cls(exc.code, f"Failed to initialize browser: {exc.message}")
        if isinstance(exc, RodError):
            return cls(exc.code, exc.message)
        return cls(INTERNAL_ERROR, str(exc) or type(exc).__name__)


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution: content for the wire, or an error."""

    content: list[ToolContent] = field(default_factory=list)
    error: RpcError | None = None
    # Structured values behind the text; never sent over the wire.
    data: dict[str, Any] | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def text(cls, text: str, data: dict[str, Any] | None = None) -> ToolResult:
        return cls(content=[ToolContent(type="text", text=text)], data=data)

    @classmethod
    def from_outcome(cls, outcome: ToolOutcome) -> ToolResult:
        return cls.text(outcome.text, data=outcome.data)

    @classmethod
    def failure(cls, exc: BaseException) -> ToolResult:
        return cls(error=RpcError.from_exception(exc))

    def to_content_list(self) -> list[dict[str, Any]]:
        """Convert to MCP content list format."""
        return [c.to_dict() for c in self.content]

    def to_response(self, request_id: Any) -> dict[str, Any]:
        """Build the JSON-RPC response; result and error never appear together."""
        if self.error is not None:
            return {"jsonrpc": "2.0", "id": request_id, "error": self.error.to_dict()}
        return {"jsonrpc": "2.0", "id": request_id, "result": {"content": self.to_content_list()}}


HandlerFunc = Callable[["BrowserPage", "RodConfig", Any], "ToolOutcome"]


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """Specification for a registered tool."""

    name: str
    parse: Callable[[dict[str, Any]], Any]
    handler: HandlerFunc
