from .http_server import HttpFileServer, HttpsFileServer, StaticRequestHandler
from .resolver import CONTENT_TYPES, Outcome, resolve
from .server import staticServer

__all__ = ["staticServer", "HttpFileServer", "HttpsFileServer", "StaticRequestHandler", "CONTENT_TYPES", "Outcome", "resolve"]
