"""Talking to a running niri over its IPC socket."""
from __future__ import annotations

import json
import logging
import os
import socket
import subprocess
from dataclasses import dataclass
from typing import Any

from .errors import IpcError

logger = logging.getLogger(__name__)

SOCKET_TIMEOUT = 2.0
VALIDATE_TIMEOUT = 10.0
MAX_RESPONSE_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True)
class ReloadResult:
    success: bool
    message: str

    def __str__(self) -> str:
        return self.message


def socket_path() -> str | None:
    return os.environ.get("NIRI_SOCKET") or None


def _format_error(error: Any) -> str:
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        for key in ("message", "error"):
            if isinstance(error.get(key), str):
                return error[key]
    return json.dumps(error)


def send_request(request: Any, *, timeout: float = SOCKET_TIMEOUT) -> Any:
    """Send one JSON request and return the decoded reply.

    Raises
    ------
    IpcError
        If niri is unreachable, the reply is malformed or niri answered
        with an ``Err``.
    """
    path = socket_path()
    if path is None:
        raise IpcError("NIRI_SOCKET not set")
    payload = json.dumps(request, separators=(",", ":")) + "\n"
    logger.debug("sending %s to %s", payload.strip(), path)
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(path)
            sock.sendall(payload.encode("utf-8"))
            with sock.makefile("rb") as reader:
                line = reader.readline(MAX_RESPONSE_SIZE + 1)
    except OSError as exc:
        raise IpcError(f"cannot talk to niri at {path}: {exc}") from exc
    if not line:
        raise IpcError("socket closed unexpectedly")
    if len(line) > MAX_RESPONSE_SIZE:
        raise IpcError(f"response exceeds {MAX_RESPONSE_SIZE} bytes")
    try:
        reply = json.loads(line)
    except ValueError as exc:
        raise IpcError(f"malformed reply from niri: {exc}") from exc
    if isinstance(reply, dict) and "Err" in reply:
        raise IpcError(_format_error(reply["Err"]))
    if isinstance(reply, dict) and "Ok" in reply:
        return reply["Ok"]
    raise IpcError(f"unexpected reply from niri: {line[:100]!r}")


def request_reload() -> ReloadResult:
    """Ask niri to reload its config; never raises."""
    if socket_path() is None:
        return ReloadResult(False, "niri is not running")
    try:
        send_request({"Action": {"LoadConfigFile": {}}})
    except IpcError as exc:
        logger.warning("config reload failed: %s", exc)
        return ReloadResult(False, f"Config reload failed: {exc}")
    logger.info("niri config reloaded")
    return ReloadResult(True, "Config reloaded")


def get_version() -> str:
    reply = send_request("Version")
    if isinstance(reply, dict) and isinstance(reply.get("Version"), str):
        return reply["Version"]
    raise IpcError(f"unexpected version reply: {reply!r}")


def validate_config(timeout: float = VALIDATE_TIMEOUT) -> str:
    """Run ``niri validate`` and return its message.

    Raises
    ------
    IpcError
        If niri cannot be run or reports the config as invalid.
    """
    try:
        proc = subprocess.run(
            ["niri", "validate"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise IpcError(f"failed to run 'niri validate': {exc}") from exc
    stdout = proc.stdout.strip()
    if proc.returncode == 0:
        return stdout or "Configuration is valid"
    raise IpcError(proc.stderr.strip() or stdout or "niri validate failed")


__all__ = [
    "ReloadResult",
    "request_reload",
    "send_request",
    "get_version",
    "validate_config",
]
