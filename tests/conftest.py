from __future__ import annotations

import shutil
import socket
import ssl
import subprocess
from pathlib import Path

import pytest


def _read_all(sock: socket.socket) -> bytes:
    data = b""
    while True:
        part = sock.recv(4096)
        if not part:
            break
        data += part
    return data


def http_request(host: str, port: int, path: str, method: str = "GET", body: bytes = b"", timeout: float = 2.0, tls: bool = False) -> bytes:
    """Send one request with Connection: close and return the raw response bytes."""
    s = socket.create_connection((host, port), timeout=timeout)
    try:
        if tls:
            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            s = ctx.wrap_socket(s, server_hostname=host)
        head = f"{method} {path} HTTP/1.1\r\nHost: {host}\r\nConnection: close\r\n"
        if body:
            head += f"Content-Length: {len(body)}\r\n"
        s.sendall(head.encode("utf-8") + b"\r\n" + body)
        s.settimeout(timeout)
        return _read_all(s)
    finally:
        s.close()


def split_response(raw: bytes) -> tuple[int, dict[str, str], bytes]:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    status = int(lines[0].split(" ", 2)[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return status, headers, body


@pytest.fixture(scope="session")
def self_signed_cert(tmp_path_factory: pytest.TempPathFactory) -> tuple[Path, Path]:
    if not shutil.which("openssl"):
        pytest.skip("openssl not available to create test cert")
    td_path = tmp_path_factory.mktemp("ssl")
    key = td_path / "server.key"
    cert = td_path / "server.crt"
    # rsa 2048, self-signed, valid 1 day
    subprocess.check_call(
        [
            "openssl", "req", "-x509", "-nodes", "-days", "1",
            "-newkey", "rsa:2048",
            "-subj", "/CN=127.0.0.1",
            "-keyout", str(key),
            "-out", str(cert),
        ],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return cert, key
