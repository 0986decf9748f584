"""Route handlers for the board protocol endpoints."""
from s83.server.routes.boards import create_board_router
from s83.server.routes.home import create_home_router

__all__ = ["create_board_router", "create_home_router"]
