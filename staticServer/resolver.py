from __future__ import annotations

import errno
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

LOG = logging.getLogger(__name__)

INDEX_FILE = "index.html"
NOT_FOUND_FILE = "404.html"
DEFAULT_CONTENT_TYPE = "text/html"

CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        ".html": "text/html",
        ".js": "text/javascript",
        ".css": "text/css",
        ".json": "application/json",
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".gif": "image/gif",
        ".svg": "image/svg+xml",
        ".ico": "image/x-icon",
        ".txt": "text/plain",
    }
)


class Outcome(NamedTuple):
    """Result of resolving one request: status code, body bytes and content type (None omits the header)."""

    status: int
    body: bytes
    content_type: Optional[str] = None

    @classmethod
    def success(cls, body: bytes, content_type: str) -> "Outcome":
        return cls(200, body, content_type)

    @classmethod
    def not_found(cls, body: Optional[bytes]) -> "Outcome":
        return cls(404, body if body is not None else b"404 Not Found", DEFAULT_CONTENT_TYPE)

    @classmethod
    def server_error(cls, code: str) -> "Outcome":
        return cls(500, f"Server Error: {code}".encode("utf-8"))


def target_path(root: str | Path, request_path: str) -> Path:
    """
    Map a request path onto the filesystem below ``root``.

    ``/`` maps to the index page. Any other path is taken relative to the root and
    normalized; ``..`` segments are collapsed but the result is not confined to the root.
    """
    relative = INDEX_FILE if request_path == "/" else request_path.lstrip("/")
    return Path(os.path.normpath(os.path.join(str(root), relative)))


def extension_of(path: str | Path) -> str:
    # last component only; dotfiles such as ".env" have no extension
    return os.path.splitext(os.path.basename(str(path)))[1]


def content_type_for(path: str | Path) -> str:
    return CONTENT_TYPES.get(extension_of(path), DEFAULT_CONTENT_TYPE)


def error_code(exc: Exception) -> str:
    code = getattr(exc, "errno", None)
    if code is not None and code in errno.errorcode:
        return errno.errorcode[code]
    return type(exc).__name__


def _outside_root(root: Path, target: Path) -> bool:
    try:
        target.relative_to(root)
    except ValueError:
        return True
    return False


def resolve(root: str | Path, request_path: str, logger: Optional[logging.Logger] = None) -> Outcome:
    """Resolve ``request_path`` against the content root and read the file it names."""
    log = logger or LOG
    root = Path(os.path.normpath(str(root)))
    target = target_path(root, request_path)
    if _outside_root(root, target):
        log.warning("request path %r resolves outside content root: %s", request_path, target)
    content_type = content_type_for(target)

    try:
        with open(target, "rb") as f:
            content = f.read()
    except FileNotFoundError:
        return Outcome.not_found(_read_fallback(root, log))
    except (OSError, ValueError) as exc:
        # ValueError: the path holds a NUL byte and cannot name a file
        code = error_code(exc)
        log.warning("error reading %s for %r: %s", target, request_path, code)
        return Outcome.server_error(code)
    return Outcome.success(content, content_type)


def _read_fallback(root: Path, log: logging.Logger) -> Optional[bytes]:
    fallback = root / NOT_FOUND_FILE
    try:
        with open(fallback, "rb") as f:
            return f.read()
    except OSError as exc:
        log.debug("no usable not-found page at %s: %s", fallback, exc)
        return None
