"""Envelope for JSON (non-streaming) endpoints.

Errors use the ``{"success": false, "error": {...}}`` shape produced by the
exception handlers; streamed turns are not wrapped at all.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope with status, message and data."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


def success_response(data: T, status: int = 200, message: str = "Success") -> dict:
    """Build a success envelope for returning from endpoints."""
    return {"status": status, "message": message, "data": data}
