from __future__ import annotations

import json
import socket
import subprocess
import threading

import pytest

from nirify import ipc
from nirify.errors import IpcError
from nirify.ipc import request_reload, send_request, validate_config


def serve_once(path, reply):
    """Accept one connection on *path*, record the request and send *reply*."""
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(str(path))
    server.listen(1)
    received: list[object] = []

    def run():
        conn, _ = server.accept()
        with conn, conn.makefile("rb") as reader:
            received.append(json.loads(reader.readline()))
            conn.sendall(reply)
        server.close()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, received


def test_reload_without_socket(monkeypatch):
    monkeypatch.delenv("NIRI_SOCKET", raising=False)
    result = request_reload()
    assert result.success is False
    assert result.message == "niri is not running"


def test_reload_success(tmp_path, monkeypatch):
    sock = tmp_path / "niri.sock"
    thread, received = serve_once(sock, b'{"Ok":"Handled"}\n')
    monkeypatch.setenv("NIRI_SOCKET", str(sock))
    result = request_reload()
    thread.join(3)
    assert result.success is True
    assert received == [{"Action": {"LoadConfigFile": {}}}]


def test_reload_error_reply(tmp_path, monkeypatch):
    sock = tmp_path / "niri.sock"
    thread, _ = serve_once(sock, b'{"Err":"config error"}\n')
    monkeypatch.setenv("NIRI_SOCKET", str(sock))
    result = request_reload()
    thread.join(3)
    assert result.success is False
    assert "config error" in result.message


def test_unreachable_socket_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("NIRI_SOCKET", str(tmp_path / "gone.sock"))
    with pytest.raises(IpcError):
        send_request("Version")


def test_validate_config(monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="error at line 3")

    monkeypatch.setattr(ipc.subprocess, "run", fake_run)
    with pytest.raises(IpcError, match="line 3"):
        validate_config()

    def ok_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(ipc.subprocess, "run", ok_run)
    assert validate_config() == "Configuration is valid"
