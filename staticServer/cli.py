from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from . import staticServer

LOG = logging.getLogger("staticServer.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="serve-static", description="Serve a static content directory over HTTP and HTTPS")
    p.add_argument("--root-dir", "-r", default="public", help="Directory to serve files from")
    p.add_argument("--host", default="0.0.0.0", help="Host/interface to bind")
    p.add_argument("--http-port", type=int, default=80, help="HTTP port (0 for ephemeral)")
    p.add_argument("--https-port", type=int, default=443, help="HTTPS port (0 for ephemeral)")
    p.add_argument("--no-https", dest="enable_https", action="store_false", help="Disable HTTPS serving")
    p.add_argument("--ssl-certfile", type=str, default="ssl/server.crt", help="Path to SSL certificate file (PEM)")
    p.add_argument("--ssl-keyfile", type=str, default="ssl/server.key", help="Path to SSL private key file (PEM)")
    p.add_argument("--log-level", default="INFO", help="Logging level")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    root = Path(args.root_dir).resolve()
    if not root.is_dir():
        LOG.error("root directory does not exist: %s", root)
        return 2

    if args.enable_https and (not args.ssl_certfile or not args.ssl_keyfile):
        LOG.error("HTTPS enabled but --ssl-certfile and --ssl-keyfile must be provided")
        return 2

    server = staticServer(
        root_dir=str(root),
        http_port=args.http_port,
        logger=LOG,
        host=args.host,
        enable_https=bool(args.enable_https),
        https_port=args.https_port,
        ssl_certfile=args.ssl_certfile,
        ssl_keyfile=args.ssl_keyfile,
    )

    stop_requested = False

    def _on_signal(signum, frame):
        nonlocal stop_requested
        LOG.info("Received signal %s, stopping...", signum)
        stop_requested = True

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    status = 0
    try:
        server.start()
        LOG.info("Servers started: HTTP=%s HTTPS=%s", server.http_sock_port, server.https_sock_port)
        while not stop_requested:
            signal.pause()
    except KeyboardInterrupt:
        LOG.info("Keyboard interrupt received, stopping servers")
    except Exception:
        LOG.exception("Server failed")
        status = 1
    finally:
        # a listener that fails to close must not mask the exit status
        try:
            server.stop()
        except Exception:
            LOG.exception("Error during stop")
        LOG.info("Servers stopped")

    return status


if __name__ == "__main__":
    sys.exit(main())
