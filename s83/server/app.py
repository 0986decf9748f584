"""FastAPI application factory."""
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from s83.protocol import TEST_PRIVATE, Creator, DifficultyGate, __version__, difficulty_factor
from s83.server.config import ServerConfig, load_config_from_env
from s83.server.errors import InternalError, MethodNotAllowedError, ServerError
from s83.server.middleware.headers import COMMON_HEADERS, ProtocolHeadersMiddleware
from s83.server.middleware.logging import RequestLoggingMiddleware
from s83.server.models.responses import ErrorDetail, ErrorResponse
from s83.server.routes.boards import create_board_router
from s83.server.routes.home import create_home_router
from s83.server.testboard import TestBoardGenerator
from s83.store import BoardStore

logger = logging.getLogger(__name__)


def _build_gate(config: ServerConfig, store: BoardStore) -> DifficultyGate:
    """Gate whose threshold follows the live board count plus the configured seed."""
    seed = config.difficulty.board_seed
    return DifficultyGate(
        enabled=config.difficulty.enabled,
        factor_source=lambda: difficulty_factor(store.count() + seed),
    )


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    When called without arguments (e.g. via uvicorn --factory), loads
    configuration from environment variables.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    if config is None:
        config = load_config_from_env()

    store = BoardStore.open(config.store_path)
    gate = _build_gate(config, store)
    if gate.enabled:
        logger.info("Difficulty gate active, board seed=%d", config.difficulty.board_seed)
    else:
        logger.info("Difficulty gate disabled")
    test_boards = TestBoardGenerator(Creator.from_hex(TEST_PRIVATE))

    app = FastAPI(
        title=config.title,
        description="Spring '83 board server",
        version=__version__,
    )
    app.state.config = config
    app.state.store = store
    app.state.gate = gate
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ProtocolHeadersMiddleware)
    app.add_exception_handler(ServerError, _server_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.include_router(create_home_router(config, store, test_boards))
    app.include_router(create_board_router(config, store, gate, test_boards))
    return app


def _error_response(exc: ServerError) -> JSONResponse:
    response = ErrorResponse(error=ErrorDetail(code=exc.error_code, message=exc.message))
    # unhandled errors are answered outside the header middleware
    headers = dict(COMMON_HEADERS)
    if isinstance(exc, MethodNotAllowedError):
        headers["Allow"] = exc.allow
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=headers)


async def _server_error_handler(request: Request, exc: ServerError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("%s %s: %s: %s", request.method, request.url.path, exc.message, exc.log_detail)
    elif exc.log_detail:
        logger.warning("%s: %s", exc.message, exc.log_detail)
    return _error_response(exc)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("internal error: %s %s", request.method, request.url.path)
    return _error_response(InternalError("internal error"))


def main() -> None:
    """Entry point for the s83d server process."""
    config = load_config_from_env()
    app = create_app(config)
    host = config.host or "0.0.0.0"
    logger.info("starting server on %s:%d", host, config.port)
    uvicorn.run(app, host=host, port=config.port)
