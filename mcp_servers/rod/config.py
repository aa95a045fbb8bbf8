from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BINARY_CANDIDATES: list[str] = [
    # IMPORTANT: Avoid snap versions - they ignore --user-data-dir!
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/local/bin/chromium",
    "/opt/chromium/chromium",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    "C:\\Program Files\\Chromium\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Chromium\\Application\\chrome.exe",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/usr/bin/google-chrome-beta",
    "/opt/google/chrome/chrome",
    "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
    "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
    "/snap/bin/chromium",
]

PATH_LOOKUP_NAMES: list[str] = ["chromium", "chromium-browser", "google-chrome", "google-chrome-stable", "chrome"]

DEFAULT_TIMEOUT = 30.0


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass
class RodConfig:
    binary_path: str
    profile_path: str
    screenshot_dir: str
    cdp_port: int = 0
    headless: bool = True
    extra_flags: list[str] = field(default_factory=list)
    default_timeout: float = DEFAULT_TIMEOUT
    cdp_timeout: float = 30.0
    launch_timeout: float = 10.0

    @classmethod
    def detect_binary(cls) -> str:
        env_path = os.environ.get("MCP_BROWSER_BINARY")
        if env_path:
            return expand_path(env_path)
        for candidate in DEFAULT_BINARY_CANDIDATES:
            path = Path(candidate)
            if path.exists() and os.access(str(path), os.X_OK):
                return str(path)
        for name in PATH_LOOKUP_NAMES:
            found = shutil.which(name)
            if found:
                return found
        # Last resort: let Popen report the missing executable.
        return "google-chrome"

    @classmethod
    def from_env(cls) -> RodConfig:
        tmp = tempfile.gettempdir()
        profile = expand_path(os.environ.get("MCP_BROWSER_PROFILE") or os.path.join(tmp, "rod-mcp-profile"))
        screenshot_dir = expand_path(os.environ.get("MCP_ROD_SCREENSHOT_DIR") or os.path.join(tmp, "rod-screenshots"))
        port = int(os.environ.get("MCP_BROWSER_PORT") or "0")
        flags_raw = os.environ.get("MCP_BROWSER_FLAGS", "")
        extra_flags = [flag.strip() for flag in flags_raw.split(",") if flag.strip()]
        return cls(
            binary_path=cls.detect_binary(),
            profile_path=profile,
            screenshot_dir=screenshot_dir,
            cdp_port=port,
            headless=os.environ.get("MCP_HEADLESS", "1") != "0",
            extra_flags=extra_flags,
            default_timeout=_env_float("MCP_ROD_TIMEOUT", DEFAULT_TIMEOUT),
            cdp_timeout=_env_float("MCP_CDP_TIMEOUT", 30.0),
            launch_timeout=_env_float("MCP_LAUNCH_TIMEOUT", 10.0),
        )
