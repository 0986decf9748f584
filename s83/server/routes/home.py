"""GET / and OPTIONS endpoint handlers."""
import logging
from typing import Optional

from fastapi import APIRouter, Response, status
from fastapi.responses import HTMLResponse

from s83.protocol import Board, S83Error
from s83.server.config import ServerConfig
from s83.server.pages import home_page
from s83.server.testboard import TestBoardGenerator
from s83.store import BoardStore

logger = logging.getLogger(__name__)


def create_home_router(config: ServerConfig, store: BoardStore, test_boards: TestBoardGenerator) -> APIRouter:
    """Create home router with injected dependencies."""
    router = APIRouter()

    @router.get("/", response_class=HTMLResponse, tags=["home"])
    async def home() -> HTMLResponse:
        admin_board: Optional[Board] = None
        if config.admin_key:
            try:
                admin_board = await store.get(config.admin_key)
            except S83Error as e:
                logger.warning("Error loading admin board for homepage: %s", e)

        test_board: Optional[Board] = None
        try:
            test_board = test_boards.generate()
        except S83Error as e:
            logger.warning("Error loading test board for homepage: %s", e)

        return HTMLResponse(home_page(config.title, store.count(), config.ttl_days, admin_board, test_board))

    @router.options("/{path:path}", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
    async def preflight(path: str) -> Response:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
