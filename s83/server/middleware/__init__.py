"""Server middleware."""
from s83.server.middleware.headers import ProtocolHeadersMiddleware
from s83.server.middleware.logging import RequestLoggingMiddleware

__all__ = ["ProtocolHeadersMiddleware", "RequestLoggingMiddleware"]
