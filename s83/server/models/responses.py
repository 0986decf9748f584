"""Response models for API endpoints."""
from typing import Annotated, Literal
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: Annotated[
        Literal[
            "BAD_REQUEST",
            "FORBIDDEN",
            "NOT_FOUND",
            "METHOD_NOT_ALLOWED",
            "CONFLICT",
            "INTERNAL_ERROR",
        ],
        Field(),
    ]
    message: Annotated[str, Field()]


class ErrorResponse(BaseModel):
    error: ErrorDetail
