"""Following boards: conditional fetch and merge with local copies."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional
from urllib.parse import urljoin, urlsplit

from ._constants import HEADER_SIGNATURE
from .board import Board, board_from_http
from .exceptions import FollowError, S83Error, TransportError
from .identity import Publisher
from .transport import Transport

if TYPE_CHECKING:
    from s83.store import BoardStore

logger = logging.getLogger(__name__)

_SPRING_URL_RE = re.compile(r"^https?://(.*)/([0-9A-Fa-f]{57}83e(0[1-9]|1[0-2])\d\d)$")


@dataclass(frozen=True)
class Follow:
    publisher: Publisher
    url: str
    handle: str = ""

    @classmethod
    def from_url(cls, url: str, handle: str = "") -> Follow:
        """Build a follow from a board URL whose last path segment is the key."""
        key = urlsplit(url).path.rstrip("/").rsplit("/", 1)[-1]
        return cls(Publisher.from_hex(key), url, handle)

    @classmethod
    def on_server(cls, server_url: str, key: str, handle: str = "") -> Follow:
        return cls(Publisher.from_hex(key), urljoin(server_url.rstrip("/") + "/", key), handle)

    @property
    def key(self) -> str:
        return str(self.publisher)

    def __str__(self) -> str:
        return f"{self.publisher} {self.handle} @ {urlsplit(self.url).netloc}"


def parse_springfile_follows(text: str) -> list[Follow]:
    """Parse a Springfile: optional handle line, then a board URL.

    Blank and ``#`` comment lines reset the pending handle.
    """
    follows: list[Follow] = []
    handle = ""
    for line in text.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            handle = ""
            continue
        if _SPRING_URL_RE.match(line):
            try:
                follows.append(Follow.from_url(line, handle))
            except S83Error:
                pass
            handle = ""
        else:
            handle = line
    return follows


async def fetch_board(transport: Transport, follow: Follow,
                      if_modified_since: Optional[str] = None) -> Optional[Board]:
    """GET a followed board. Returns None when the server answers 304."""
    resp = await transport.get_board(follow.url, if_modified_since)
    if resp.status_code == 304:
        return None
    if resp.status_code != 200:
        raise TransportError(f"Status code: {resp.status_code}", resp.status_code)
    return board_from_http(follow.key, resp.headers.get(HEADER_SIGNATURE), resp.content)


@dataclass
class FollowReport:
    total: int = 0
    new: dict[str, Board] = field(default_factory=dict)
    local: dict[str, Board] = field(default_factory=dict)
    not_modified: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return self.total > 0 and len(self.failed) == self.total

    def raise_for_failure(self) -> None:
        if self.all_failed:
            raise FollowError("Failed to get any boards", self.failed)


async def sync_follows(transport: Transport, follows: Iterable[Follow], store: BoardStore) -> FollowReport:
    """Fetch each follow and persist boards that differ from the local copy.

    A failure for one follow is recorded and never stops the others. A server
    that ignores If-Modified-Since is caught by comparing against the local copy.
    """
    report = FollowReport()
    for follow in follows:
        report.total += 1
        local: Optional[Board] = None
        try:
            local = await store.get(follow.key)
            report.local[follow.key] = local
        except S83Error as e:
            logger.debug("No usable local board for %s: %s", follow.key, e)

        try:
            board = await fetch_board(transport, follow, local.last_modified if local else None)
        except S83Error as e:
            logger.warning("Failed to get board for %s: %s", follow, e)
            report.failed[follow.key] = str(e)
            continue

        if board is None:
            logger.info("304 - no new board for %s", follow)
            report.not_modified.append(follow.key)
            continue
        if board == local:
            continue

        try:
            await store.add(board)
        except S83Error as e:
            logger.warning("Failed to save board for %s: %s", follow, e)
            report.failed[follow.key] = str(e)
            continue
        report.new[follow.key] = board
    return report
