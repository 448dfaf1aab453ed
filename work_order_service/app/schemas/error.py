"""Error response schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standardized error response: a message plus request metadata."""

    error: str
    details: Any = None  # validation errors, when there are any
    request_id: str | None = None
    path: str | None = None


class ReasonResponse(BaseModel):
    """Returned when a request is understood but cannot be acted on."""

    reason: str
    request_id: str | None = None
    path: str | None = None
