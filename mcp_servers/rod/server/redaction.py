"""Redaction utilities for logging and frame-dumps.

Typed text can carry credentials and long scripts flood the log, so both
are shortened before they reach stderr or a dump file.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

MAX_SCRIPT_CHARS = 200

_MASKED_FIELDS = {"text"}


def redact_url(url: str) -> str:
    """Drop query string and fragment, keep scheme/host/path."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    if not parts.query and not parts.fragment:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def redact_tool_arguments(name: str, arguments: Any) -> Any:
    if not isinstance(arguments, dict):
        return arguments
    safe: dict[str, Any] = {}
    for key, value in arguments.items():
        if name == "rod_fill" and key in _MASKED_FIELDS and isinstance(value, str):
            safe[key] = f"<redacted {len(value)} chars>"
        elif key == "url" and isinstance(value, str):
            safe[key] = redact_url(value)
        elif key == "script" and isinstance(value, str) and len(value) > MAX_SCRIPT_CHARS:
            safe[key] = value[:MAX_SCRIPT_CHARS] + "…"
        else:
            safe[key] = value
    return safe


def redact_jsonrpc_for_log(message: Any) -> Any:
    """Copy of a JSON-RPC message with tool arguments redacted."""
    if not isinstance(message, dict):
        return message
    params = message.get("params")
    if message.get("method") != "tools/call" or not isinstance(params, dict):
        return message
    safe_params = dict(params)
    safe_params["arguments"] = redact_tool_arguments(str(params.get("name") or ""), params.get("arguments"))
    safe = dict(message)
    safe["params"] = safe_params
    return safe
