from __future__ import annotations

from pathlib import Path

import pytest

from staticServer import staticServer


def test_ports_are_none_before_start(tmp_path: Path):
    srv = staticServer(root_dir=str(tmp_path), http_port=0, enable_https=False)
    assert srv.http_sock_port is None
    assert srv.https_sock_port is None


def test_staticServer_start_https_requires_certs(tmp_path: Path):
    """Enabling HTTPS without cert/key raises ValueError and binds nothing."""
    srv = staticServer(root_dir=str(tmp_path), http_port=0, host="127.0.0.1", enable_https=True, https_port=0)
    with pytest.raises(ValueError):
        srv.start()
    assert srv.http_sock_port is None


def test_staticServer_http_only(tmp_path: Path):
    srv = staticServer(root_dir=str(tmp_path), http_port=0, host="127.0.0.1", enable_https=False)
    srv.start()
    try:
        assert srv.http_sock_port
        assert srv.https_sock_port is None
    finally:
        srv.stop()
    assert srv.http_sock_port is None


def test_staticServer_stop_exception_paths():
    """Stop handles exceptions from sub-server stop() calls without raising."""
    srv = staticServer(root_dir=".", http_port=0, enable_https=False)
    calls = []

    class _Boom:
        def stop(self) -> None:
            calls.append("boom")
            raise RuntimeError("boom")

    # inject fake sub-servers to exercise except branches
    srv._https = _Boom()  # type: ignore[assignment]
    srv._http = _Boom()  # type: ignore[assignment]

    srv.stop()
    assert calls == ["boom", "boom"]
    assert srv._http is None and srv._https is None


def test_staticServer_stop_is_idempotent(tmp_path: Path):
    srv = staticServer(root_dir=str(tmp_path), http_port=0, host="127.0.0.1", enable_https=False)
    srv.stop()
    srv.start()
    srv.stop()
    srv.stop()


def test_staticServer_start_twice_keeps_listener(tmp_path: Path):
    srv = staticServer(root_dir=str(tmp_path), http_port=0, host="127.0.0.1", enable_https=False)
    srv.start()
    try:
        port = srv.http_sock_port
        srv.start()
        assert srv.http_sock_port == port
    finally:
        srv.stop()
