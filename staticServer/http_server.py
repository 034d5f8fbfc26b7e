from __future__ import annotations

import logging
import ssl
import threading
from functools import partial
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable, Optional

from .resolver import Outcome, resolve

LOG = logging.getLogger(__name__)


class StaticRequestHandler(BaseHTTPRequestHandler):
    """Serve every request, whatever its method, from the content root."""

    protocol_version = "HTTP/1.1"

    def __init__(self, *args: Any, root_dir: str | Path, logger: Optional[logging.Logger] = None, **kwargs: Any) -> None:
        self.root_dir = Path(root_dir)
        self.logger = logger or LOG
        super().__init__(*args, **kwargs)

    def __getattr__(self, name: str) -> Callable[[], None]:
        # BaseHTTPRequestHandler dispatches on do_<METHOD>; any method gets the same handler
        if name.startswith("do_"):
            return self._serve
        raise AttributeError(name)

    def _serve(self) -> None:
        self._discard_body()
        outcome = resolve(self.root_dir, self.path, logger=self.logger)
        self._write(outcome)

    def _discard_body(self) -> None:
        length = self.headers.get("Content-Length")
        if not length:
            return
        try:
            remaining = int(length)
        except ValueError:
            self.close_connection = True
            return
        while remaining > 0:
            chunk = self.rfile.read(min(remaining, 65536))
            if not chunk:
                break
            remaining -= len(chunk)

    def _write(self, outcome: Outcome) -> None:
        self.send_response(outcome.status)
        if outcome.content_type is not None:
            self.send_header("Content-Type", outcome.content_type)
        self.send_header("Content-Length", str(len(outcome.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(outcome.body)

    def log_request(self, code: int | str = "-", size: int | str = "-") -> None:
        # no access log
        pass

    def log_message(self, format: str, *args: Any) -> None:
        self.logger.info("%s - - %s", self.client_address[0], format % args)


class _TLSHTTPServer(ThreadingHTTPServer):
    """Threaded server whose TLS handshake runs in the per-connection thread, not in accept()."""

    def finish_request(self, request: Any, client_address: Any) -> None:
        try:
            request.do_handshake()
        except (ssl.SSLError, OSError) as exc:
            LOG.debug("TLS handshake with %s failed: %s", client_address[0], exc)
            return
        super().finish_request(request, client_address)


class HttpFileServer:
    scheme = "HTTP"
    server_class: type[ThreadingHTTPServer] = ThreadingHTTPServer

    def __init__(self, root_dir: str | Path, host: str = "0.0.0.0", port: int = 80, logger: Optional[logging.Logger] = None) -> None:
        self.root_dir = Path(root_dir).resolve()
        self.host = host
        self.port = port
        self.logger = logger or LOG
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self.sock_port: Optional[int] = None

    def _handler(self) -> Callable[..., StaticRequestHandler]:
        return partial(StaticRequestHandler, root_dir=self.root_dir, logger=self.logger)

    def _bind(self) -> ThreadingHTTPServer:
        return self.server_class((self.host, self.port), self._handler())

    def start(self) -> None:
        if self._server:
            return
        server = self._bind()
        self._server = server
        self.sock_port = server.server_address[1]
        self.logger.info("%s server serving %s on %s:%d", self.scheme, self.root_dir, self.host, self.sock_port)
        thr = threading.Thread(target=server.serve_forever, daemon=True)
        self._thread = thr
        thr.start()

    def stop(self) -> None:
        if self._server:
            try:
                self._server.shutdown()
            except Exception:
                self.logger.exception("Error shutting down %s server", self.scheme)
            try:
                self._server.server_close()
            except Exception:
                self.logger.exception("Error closing %s server", self.scheme)
            self._server = None
            self.logger.info("%s server stopped", self.scheme)
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
            self._thread = None
        self.sock_port = None


class HttpsFileServer(HttpFileServer):
    scheme = "HTTPS"
    server_class = _TLSHTTPServer

    def __init__(
        self,
        root_dir: str | Path,
        host: str = "0.0.0.0",
        port: int = 443,
        certfile: str | Path | None = None,
        keyfile: str | Path | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(root_dir, host=host, port=port, logger=logger)
        self.certfile = certfile
        self.keyfile = keyfile

    def _ssl_context(self) -> ssl.SSLContext:
        if not self.certfile or not self.keyfile:
            raise ValueError("Both certfile and keyfile are required for HTTPS")
        ctx = ssl.create_default_context(purpose=ssl.Purpose.CLIENT_AUTH)
        ctx.minimum_version = ssl.TLSVersion.TLSv1_2
        ctx.load_cert_chain(certfile=str(self.certfile), keyfile=str(self.keyfile))
        return ctx

    def _bind(self) -> ThreadingHTTPServer:
        # certificate material is loaded before the port is bound
        ctx = self._ssl_context()
        server = super()._bind()
        server.socket = ctx.wrap_socket(server.socket, server_side=True, do_handshake_on_connect=False)
        return server
