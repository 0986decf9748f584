"""Pydantic models for server responses."""
from s83.server.models.responses import ErrorDetail, ErrorResponse

__all__ = ["ErrorDetail", "ErrorResponse"]
