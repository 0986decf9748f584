"""HTTP transport layer with retry logic for talking to board servers."""

import asyncio
import random
from typing import Any
from urllib.parse import urljoin

import httpx

from ._constants import HEADER_IF_MODIFIED_SINCE, HEADER_SIGNATURE, HEADER_VERSION, SPRING_VERSION
from .board import Board
from .exceptions import TransportError


class Transport:
    def __init__(self, timeout: float = 30.0, max_retries: int = 3,
                 transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "Transport":
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout), transport=self._transport,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20))
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {HEADER_VERSION: SPRING_VERSION}

    def _backoff(self, attempt: int) -> float:
        delay = min(1.0 * (2 ** attempt), 30.0)
        return max(0.1, delay + delay * 0.25 * (2 * random.random() - 1))

    def _retryable(self, code: int) -> bool:
        return code in (408, 500, 502, 503, 504)

    async def get_board(self, url: str, if_modified_since: str | None = None,
                        retry: bool = True) -> httpx.Response:
        headers = self._headers()
        if if_modified_since:
            headers[HEADER_IF_MODIFIED_SINCE] = if_modified_since
        return await self._request("GET", url, headers, None, retry)

    async def put_board(self, server_url: str, board: Board, retry: bool = True) -> httpx.Response:
        headers = self._headers()
        headers["Content-Type"] = "text/html;charset=utf-8"
        headers[HEADER_SIGNATURE] = str(board.signature)
        url = urljoin(server_url.rstrip("/") + "/", board.key)
        return await self._request("PUT", url, headers, board.content, retry)

    async def _request(self, method: str, url: str, headers: dict[str, str],
                       content: bytes | None, retry: bool) -> httpx.Response:
        if not self._client:
            raise TransportError("Transport not initialized")
        last_err: Exception | None = None
        attempts = self._max_retries if retry else 1
        for i in range(attempts):
            try:
                resp = await self._client.request(method, url, headers=headers, content=content)
                if self._retryable(resp.status_code) and i < attempts - 1:
                    await asyncio.sleep(self._backoff(i))
                    continue
                return resp
            except (httpx.TimeoutException, httpx.RequestError) as e:
                last_err = e
                if i < attempts - 1:
                    await asyncio.sleep(self._backoff(i))
        raise TransportError(f"Request failed after {attempts} attempts: {last_err}")
