"""
Tool catalog advertised by tools/list.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        # Hand out a copy so callers cannot mutate the catalog.
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }


def _schema(properties: dict[str, dict[str, str]], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


TOOL_DEFINITIONS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="rod_navigate",
        description="Navigate to a URL in the browser",
        input_schema=_schema(
            {"url": {"type": "string", "description": "The URL to navigate to"}},
            ["url"],
        ),
    ),
    ToolDescriptor(
        name="rod_click",
        description="Click an element by CSS selector",
        input_schema=_schema(
            {"selector": {"type": "string", "description": "CSS selector for the element to click"}},
            ["selector"],
        ),
    ),
    ToolDescriptor(
        name="rod_screenshot",
        description="Take a screenshot of the current page",
        input_schema=_schema(
            {
                "filename": {
                    "type": "string",
                    "description": "Optional filename for the screenshot (default: timestamp)",
                },
                "fullPage": {
                    "type": "boolean",
                    "description": "Capture full page or just viewport (default: false)",
                },
            }
        ),
    ),
    ToolDescriptor(
        name="rod_get_attribute",
        description="Get an HTML attribute value from an element (perfect for HTMX-R state)",
        input_schema=_schema(
            {
                "selector": {"type": "string", "description": "CSS selector for the element"},
                "attribute": {
                    "type": "string",
                    "description": "Attribute name to read (e.g., 'data-state-loading')",
                },
            },
            ["selector", "attribute"],
        ),
    ),
    ToolDescriptor(
        name="rod_get_text",
        description="Get the text content of an element",
        input_schema=_schema(
            {"selector": {"type": "string", "description": "CSS selector for the element"}},
            ["selector"],
        ),
    ),
    ToolDescriptor(
        name="rod_wait_for",
        description="Wait for an element to appear",
        input_schema=_schema(
            {
                "selector": {"type": "string", "description": "CSS selector for the element to wait for"},
                "timeout": {"type": "number", "description": "Timeout in seconds (default: 30)"},
            },
            ["selector"],
        ),
    ),
    ToolDescriptor(
        name="rod_eval",
        description="Execute JavaScript in the page context",
        input_schema=_schema(
            {"script": {"type": "string", "description": "JavaScript code to execute"}},
            ["script"],
        ),
    ),
    ToolDescriptor(
        name="rod_fill",
        description="Fill an input field with text",
        input_schema=_schema(
            {
                "selector": {"type": "string", "description": "CSS selector for the input element"},
                "text": {"type": "string", "description": "Text to fill into the input"},
            },
            ["selector", "text"],
        ),
    ),
)

TOOL_NAMES: tuple[str, ...] = tuple(t.name for t in TOOL_DEFINITIONS)


def get_all_tool_definitions() -> list[dict[str, Any]]:
    return [t.to_dict() for t in TOOL_DEFINITIONS]
