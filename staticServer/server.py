from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .http_server import HttpFileServer, HttpsFileServer

LOG = logging.getLogger(__name__)


class staticServer:
    """
    Main server class that runs the plaintext and TLS listeners over one content root.

    Both listeners share the same request handler and keep no state between requests.
    The HTTPS listener is started first: a certificate or key that fails to load aborts
    start() before any port is bound.
    """

    def __init__(
        self,
        root_dir: str | Path,
        http_port: int = 80,
        logger: Optional[logging.Logger] = None,
        host: str = "0.0.0.0",
        enable_https: bool = True,
        https_port: int = 443,
        ssl_certfile: str | Path | None = None,
        ssl_keyfile: str | Path | None = None,
    ) -> None:
        self.root_dir = Path(root_dir).resolve()
        self.http_port = http_port
        self.https_port = https_port
        self.host = host
        self.enable_https = enable_https
        self.ssl_certfile = ssl_certfile
        self.ssl_keyfile = ssl_keyfile
        self.logger = logger or LOG
        self._http: Optional[HttpFileServer] = None
        self._https: Optional[HttpsFileServer] = None

    @property
    def http_sock_port(self) -> Optional[int]:
        return self._http.sock_port if self._http else None

    @property
    def https_sock_port(self) -> Optional[int]:
        return self._https.sock_port if self._https else None

    def start(self) -> None:
        """Start both listeners. If a port is 0, the OS assigns an ephemeral port."""
        if self._http:
            return
        if self.enable_https:
            https = HttpsFileServer(
                self.root_dir,
                host=self.host,
                port=self.https_port,
                certfile=self.ssl_certfile,
                keyfile=self.ssl_keyfile,
                logger=self.logger,
            )
            https.start()
            self._https = https
        http = HttpFileServer(self.root_dir, host=self.host, port=self.http_port, logger=self.logger)
        try:
            http.start()
        except Exception:
            self.stop()
            raise
        self._http = http

    def stop(self) -> None:
        """Stop listeners and release ports. In-flight requests are not awaited."""
        for name in ("_http", "_https"):
            srv = getattr(self, name)
            if srv is None:
                continue
            try:
                srv.stop()
            except Exception:
                self.logger.exception("Error stopping %s listener", name.lstrip("_").upper())
            setattr(self, name, None)
