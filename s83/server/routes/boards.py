"""GET and PUT /<key> endpoint handlers."""
import logging
import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from fastapi import APIRouter, Request, Response, status

from s83.protocol import HEADER_IF_MODIFIED_SINCE, HEADER_SIGNATURE, TEST_PUBLIC, Board, DifficultyGate, S83Error, board_from_http
from s83.server.config import ServerConfig
from s83.server.errors import BadRequestError, ConflictError, ForbiddenError, InternalError, MethodNotAllowedError, NotFoundError
from s83.server.testboard import TestBoardGenerator
from s83.store import BoardNotFoundError, BoardStore, InvalidBoardOnDiskError, StorageError

logger = logging.getLogger(__name__)

KEY_PATH_RE = re.compile(r"^[0-9A-Fa-f]{64}$")
BOARD_MEDIA_TYPE = "text/html;charset=utf-8"


def parse_if_modified_since(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 5322 date header. Unparseable values are ignored."""
    if not value:
        return None
    try:
        ts = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _key_from_path(key: str) -> str:
    if not KEY_PATH_RE.match(key):
        raise BadRequestError("invalid key")
    return key.lower()


def create_board_router(config: ServerConfig, store: BoardStore, gate: DifficultyGate,
                        test_boards: TestBoardGenerator) -> APIRouter:
    """Create board router with injected dependencies."""
    router = APIRouter()
    ttl = timedelta(days=config.ttl_days)

    def expired(board: Board) -> bool:
        return not board.after(utcnow() - ttl)

    async def evict(key: str, board: Board) -> None:
        async with store.key_lock(key):
            try:
                current = await store.get(key)
            except S83Error:
                return
            if current != board:
                return
            logger.info("Removing expired board %s", key)
            try:
                await store.remove(key)
            except BoardNotFoundError:
                pass
            except StorageError as e:
                logger.error("Failed removing expired board %s: %s", key, e)

    @router.get("/{key}", tags=["boards"])
    async def get_board(key: str, request: Request) -> Response:
        """Serve the latest board for a key, honouring If-Modified-Since."""
        key = _key_from_path(key)
        if key in config.blocklist:
            raise ForbiddenError("key blocked")

        if key == TEST_PUBLIC:
            try:
                board = test_boards.generate()
            except S83Error as e:
                raise InternalError("failed generating board", log_detail=str(e)) from e
        else:
            try:
                board = await store.get(key)
            except BoardNotFoundError:
                raise NotFoundError("board not found")
            except InvalidBoardOnDiskError as e:
                logger.warning("Invalid board in store for %s: %s", key, e)
                raise NotFoundError("board not found")
            except StorageError as e:
                raise InternalError("error loading board", log_detail=str(e)) from e

        if not board.verify_signature():
            raise InternalError("bad board", log_detail=f"board from store failed signature validation: {key}")

        if expired(board):
            await evict(key, board)
            raise NotFoundError("board not found")

        header = request.headers.get(HEADER_IF_MODIFIED_SINCE)
        since = parse_if_modified_since(header)
        if since is not None and not board.after(since):
            logger.info("304 - board (%s) not newer than request (%s)", board.last_modified, header)
            return Response(status_code=status.HTTP_304_NOT_MODIFIED)

        return Response(
            content=board.content,
            headers={
                "Content-Type": BOARD_MEDIA_TYPE,
                HEADER_SIGNATURE: str(board.signature),
                "Last-Modified": board.last_modified,
            },
        )

    @router.put("/{key}", status_code=status.HTTP_204_NO_CONTENT, tags=["boards"])
    async def put_board(key: str, request: Request) -> Response:
        """Accept a board newer than the one held for its key."""
        key = _key_from_path(key)
        if key in config.blocklist:
            raise ForbiddenError("key blocked", log_detail=f"PUT blocked for key: {key}")

        body = await request.body()
        try:
            board = board_from_http(key, request.headers.get(HEADER_SIGNATURE), body)
        except S83Error as e:
            raise BadRequestError("bad board", log_detail=f"PUT invalid board for key: {key}: {e}") from e

        async with store.key_lock(key):
            try:
                existing: Optional[Board] = await store.get(key)
            except (BoardNotFoundError, InvalidBoardOnDiskError):
                existing = None
            except StorageError as e:
                raise InternalError("error loading board", log_detail=str(e)) from e

            if existing is not None:
                if not board.after_board(existing):
                    raise ConflictError("not newer than existing board")
            elif not gate.admits(board.publisher):
                raise ForbiddenError("key does not meet difficulty", log_detail=f"PUT key too weak: {key}")

            if expired(board):
                raise ConflictError(f"older than TTL: {config.ttl_days} days")

            try:
                await store.add(board)
            except StorageError as e:
                raise InternalError("error saving board", log_detail=str(e)) from e

        logger.info("Stored board for %s (%s)", key, "update" if existing else "new")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.api_route("/{path:path}", methods=["GET", "PUT", "POST", "DELETE", "PATCH", "HEAD"], include_in_schema=False)
    async def fallthrough(path: str, request: Request) -> Response:
        if path == "":
            raise MethodNotAllowedError("use GET", allow="GET, OPTIONS")
        if KEY_PATH_RE.match(path):
            raise MethodNotAllowedError("use GET/PUT", allow="GET, PUT, OPTIONS")
        raise BadRequestError("invalid key")

    return router
