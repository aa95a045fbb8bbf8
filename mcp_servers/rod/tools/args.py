"""
Validated argument records, one per tool.

Raw `arguments` mappings are decoded here before any tool runs; a tool only
ever sees a fully typed record.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, ClassVar

from ..errors import InvalidArguments

DEFAULT_WAIT_TIMEOUT = 30.0


def _require_str(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str):
        raise InvalidArguments(key, "string")
    return value


def _optional_str(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArguments(key, "string")
    return value


def _optional_bool(arguments: dict[str, Any], key: str, default: bool) -> bool:
    value = arguments.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise InvalidArguments(key, "boolean")
    return value


def _optional_number(arguments: dict[str, Any], key: str, default: float) -> float:
    value = arguments.get(key)
    if value is None:
        return default
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArguments(key, "number")
    try:
        number = float(value)
    except OverflowError:
        raise InvalidArguments(key, "finite number") from None
    if not math.isfinite(number):
        raise InvalidArguments(key, "finite number")
    if number < 0:
        raise InvalidArguments(key, "non-negative number")
    return number


def default_screenshot_name() -> str:
    return f"screenshot_{int(time.time())}.png"


@dataclass(frozen=True, slots=True)
class NavigateArgs:
    tool: ClassVar[str] = "rod_navigate"
    url: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> NavigateArgs:
        return cls(url=_require_str(arguments, "url"))


@dataclass(frozen=True, slots=True)
class ClickArgs:
    tool: ClassVar[str] = "rod_click"
    selector: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> ClickArgs:
        return cls(selector=_require_str(arguments, "selector"))


@dataclass(frozen=True, slots=True)
class ScreenshotArgs:
    tool: ClassVar[str] = "rod_screenshot"
    filename: str
    full_page: bool = False

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> ScreenshotArgs:
        filename = _optional_str(arguments, "filename") or default_screenshot_name()
        return cls(filename=filename, full_page=_optional_bool(arguments, "fullPage", False))


@dataclass(frozen=True, slots=True)
class GetAttributeArgs:
    tool: ClassVar[str] = "rod_get_attribute"
    selector: str
    attribute: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> GetAttributeArgs:
        return cls(
            selector=_require_str(arguments, "selector"),
            attribute=_require_str(arguments, "attribute"),
        )


@dataclass(frozen=True, slots=True)
class GetTextArgs:
    tool: ClassVar[str] = "rod_get_text"
    selector: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> GetTextArgs:
        return cls(selector=_require_str(arguments, "selector"))


@dataclass(frozen=True, slots=True)
class WaitForArgs:
    tool: ClassVar[str] = "rod_wait_for"
    selector: str
    timeout: float = DEFAULT_WAIT_TIMEOUT

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> WaitForArgs:
        return cls(
            selector=_require_str(arguments, "selector"),
            timeout=_optional_number(arguments, "timeout", DEFAULT_WAIT_TIMEOUT),
        )


@dataclass(frozen=True, slots=True)
class EvalArgs:
    tool: ClassVar[str] = "rod_eval"
    script: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> EvalArgs:
        return cls(script=_require_str(arguments, "script"))


@dataclass(frozen=True, slots=True)
class FillArgs:
    tool: ClassVar[str] = "rod_fill"
    selector: str
    text: str

    @classmethod
    def parse(cls, arguments: dict[str, Any]) -> FillArgs:
        return cls(
            selector=_require_str(arguments, "selector"),
            text=_require_str(arguments, "text"),
        )


ToolArgs = (
    NavigateArgs | ClickArgs | ScreenshotArgs | GetAttributeArgs | GetTextArgs | WaitForArgs | EvalArgs | FillArgs
)

__all__ = [
    "DEFAULT_WAIT_TIMEOUT",
    "NavigateArgs",
    "ClickArgs",
    "ScreenshotArgs",
    "GetAttributeArgs",
    "GetTextArgs",
    "WaitForArgs",
    "EvalArgs",
    "FillArgs",
    "ToolArgs",
    "default_screenshot_name",
]
