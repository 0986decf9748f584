"""Request logging middleware."""
import logging
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from s83.protocol import HEADER_VERSION

logger = logging.getLogger("s83.server")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs incoming requests. Board signatures and bodies are never logged."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        start_time = time.perf_counter()
        client = request.client.host if request.client else "unknown"
        version = request.headers.get(HEADER_VERSION, "none")
        logger.info("Request: %s %s %s spring-version=%s", client, request.method, request.url.path, version)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("Response: %s %s status=%d duration=%.2fms", request.method, request.url.path, response.status_code, duration_ms)
        return response
