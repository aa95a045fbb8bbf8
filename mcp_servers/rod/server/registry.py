"""
Tool registry with dispatch table for MCP server.

Dispatch order for a call: look the tool up, validate its arguments, make
sure the browser session exists, then run the handler. Bad input is
rejected before a browser is ever launched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import UnknownTool
from .types import ToolResult, ToolSpec

if TYPE_CHECKING:
    from ..config import RodConfig
    from ..session_manager import SessionManager

logger = logging.getLogger("mcp.rod.registry")


class ToolRegistry:
    """Registry for tool handlers with lazy browser session management."""

    def __init__(self) -> None:
        self._specs: dict[str, ToolSpec] = {}

    def register_many(self, specs: dict[str, ToolSpec]) -> None:
        self._specs.update(specs)

    def dispatch(
        self,
        name: str,
        config: RodConfig,
        session: SessionManager,
        arguments: dict[str, Any],
    ) -> ToolResult:
        """
        Dispatch tool call to its handler.

        Raises:
            UnknownTool: no tool registered under `name`
            InvalidArguments: `arguments` do not match the tool's record
            SessionError: the browser session could not be created
            ToolError: the tool itself failed
        """
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownTool(name)

        args = spec.parse(arguments)
        page = session.ensure()
        outcome = spec.handler(page, config, args)
        return ToolResult.from_outcome(outcome)

    @property
    def tool_names(self) -> list[str]:
        return list(self._specs.keys())

    def __len__(self) -> int:
        return len(self._specs)


def create_default_registry() -> ToolRegistry:
    from .handlers import ROD_HANDLERS

    registry = ToolRegistry()
    registry.register_many(ROD_HANDLERS)
    return registry
