"""Custom exception types for the server."""
from typing import Optional


class ServerError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, log_detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.log_detail = log_detail


class BadRequestError(ServerError):
    status_code = 400
    error_code = "BAD_REQUEST"


class ForbiddenError(ServerError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(ServerError):
    status_code = 404
    error_code = "NOT_FOUND"


class MethodNotAllowedError(ServerError):
    status_code = 405
    error_code = "METHOD_NOT_ALLOWED"

    def __init__(self, message: str, allow: str, log_detail: Optional[str] = None) -> None:
        super().__init__(message, log_detail)
        self.allow = allow


class ConflictError(ServerError):
    status_code = 409
    error_code = "CONFLICT"


class InternalError(ServerError):
    status_code = 500
    error_code = "INTERNAL_ERROR"
