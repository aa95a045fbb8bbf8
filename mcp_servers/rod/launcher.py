from __future__ import annotations

import contextlib
import json
import logging
import socket
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.error import URLError
from urllib.request import Request, urlopen

from .config import RodConfig, expand_path

logger = logging.getLogger("mcp.rod.launcher")


@dataclass
class LaunchResult:
    command: list[str]
    started: bool
    message: str


class BrowserLauncher:
    """Spawns and owns the Chrome process the session talks to."""

    def __init__(self, config: RodConfig | None = None) -> None:
        self.config = config or RodConfig.from_env()
        self.process: subprocess.Popen | None = None

    def is_running(self) -> bool:
        proc = self.process
        return proc is not None and proc.poll() is None

    def stop(self, *, timeout: float = 2.0) -> bool:
        """Best-effort stop of the launcher-owned Chrome process."""
        proc = self.process
        if proc is None:
            return False
        self.process = None
        if proc.poll() is not None:
            return True

        with contextlib.suppress(OSError):
            proc.terminate()
        try:
            proc.wait(timeout=max(0.1, float(timeout)))
            return True
        except subprocess.TimeoutExpired:
            pass

        # Escalate to kill.
        with contextlib.suppress(OSError):
            proc.kill()
        with contextlib.suppress(subprocess.TimeoutExpired):
            proc.wait(timeout=1.0)
        return True

    def _build_common_flags(self) -> list[str]:
        flags = [
            f"--remote-debugging-port={self.config.cdp_port}",
            f"--user-data-dir={expand_path(self.config.profile_path)}",
            "--remote-allow-origins=*",
            "--no-first-run",
            "--no-default-browser-check",
            "--disable-dev-shm-usage",
        ]
        if self.config.headless:
            flags.append("--headless=new")
        else:
            flags.append("--window-size=1280,900")
        return flags

    def build_launch_command(self, extra: list[str] | None = None) -> list[str]:
        flags = self._build_common_flags() + self.config.extra_flags
        if extra:
            flags.extend(extra)
        # Chrome opens a blank tab; the session creates its own page target.
        return [self.config.binary_path, *flags, "about:blank"]

    def _port_available(self, timeout: float = 0.2) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            try:
                result = sock.connect_ex(("127.0.0.1", self.config.cdp_port))
                return result != 0
            except OSError:
                return False

    def _cdp_ready(self, timeout: float = 0.4) -> bool:
        endpoint = f"http://127.0.0.1:{self.config.cdp_port}/json/version"
        try:
            with urlopen(endpoint, timeout=timeout) as resp:
                return resp.status == 200
        except (OSError, TimeoutError, URLError):
            return False

    def ensure_running(self, timeout: float | None = None) -> LaunchResult:
        """Launch Chrome unless an owned instance already answers on the CDP port."""
        if timeout is None:
            timeout = self.config.launch_timeout

        if self.is_running() and self._cdp_ready():
            return LaunchResult([], False, "Chrome already running")

        if not self.config.cdp_port:
            self.config.cdp_port = self.find_free_port()
        elif not self._port_available():
            return LaunchResult([], False, f"Port {self.config.cdp_port} already in use")

        with contextlib.suppress(OSError):
            Path(expand_path(self.config.profile_path)).mkdir(parents=True, exist_ok=True)

        cmd = self.build_launch_command()
        logger.info("launching browser: %s", cmd[0])
        try:
            self.process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            return LaunchResult(cmd, False, f"browser executable could not be started ({cmd[0]}): {exc}")

        deadline = time.time() + timeout
        while time.time() < deadline:
            if self._cdp_ready():
                return LaunchResult(cmd, True, "Chrome launched")
            if self.process.poll() is not None:
                code = self.process.returncode
                self.process = None
                return LaunchResult(cmd, False, f"Chrome exited during startup (exit code {code})")
            time.sleep(0.1)
        self.stop()
        return LaunchResult(cmd, False, "Chrome launch timed out")

    @staticmethod
    def find_free_port() -> int:
        with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
            s.bind(("127.0.0.1", 0))
            return s.getsockname()[1]

    def cdp_version(self, timeout: float = 2.0) -> dict:
        endpoint = f"http://127.0.0.1:{self.config.cdp_port}/json/version"
        try:
            req = Request(endpoint, headers={"User-Agent": "rod-mcp-server"})
            with urlopen(req, timeout=timeout) as resp:
                return json.loads(resp.read().decode())
        except (URLError, OSError, ValueError) as exc:
            raise RuntimeError(f"CDP not reachable on port {self.config.cdp_port}: {exc}") from exc

    def list_targets(self) -> list[dict]:
        endpoint = f"http://127.0.0.1:{self.config.cdp_port}/json/list"
        try:
            req = Request(endpoint, headers={"User-Agent": "rod-mcp-server"})
            with urlopen(req, timeout=0.5) as resp:
                payload = resp.read()
                return json.loads(payload.decode())
        except (URLError, OSError, ValueError):
            return []

    def browser_ws_url(self) -> str:
        ws_url = self.cdp_version().get("webSocketDebuggerUrl")
        if not ws_url:
            raise RuntimeError("CDP browser WebSocket URL not found")
        return ws_url
