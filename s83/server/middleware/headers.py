"""Protocol and CORS headers added to every response."""
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from s83.protocol import HEADER_VERSION, SPRING_VERSION

COMMON_HEADERS = {
    HEADER_VERSION: SPRING_VERSION,
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, PUT, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, If-Modified-Since, Spring-Signature, Spring-Version",
    "Access-Control-Expose-Headers": "Content-Type, Last-Modified, Spring-Signature, Spring-Version",
}


class ProtocolHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        response = await call_next(request)
        for name, value in COMMON_HEADERS.items():
            response.headers[name] = value
        return response
