"""Application exception classes and handlers."""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception.

    ``details`` is optional context added to the error body, e.g. the
    conversation a failed turn was recorded under.
    """

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details: dict[str, Any] | None = None
        super().__init__(message)


# --- Bad Request (400) ---


class ValidationError(AppException):
    """Chat turn is structurally invalid."""

    def __init__(self, message: str = "Message and agent ID are required") -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


# --- Authorization (403) ---


class AuthorizationError(AppException):
    """Insufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


# --- Not Found (404) ---


class SessionNotFoundError(AppException):
    """Chat session not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Conversation not found",
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


# --- Bad Gateway (502) ---


class UpstreamUnavailableError(AppException):
    """Upstream completion service could not be reached."""

    def __init__(self, message: str = "Failed to connect to chat service") -> None:
        super().__init__(
            message=message,
            code="UPSTREAM_UNAVAILABLE",
            status_code=502,
        )


class UpstreamErrorStatusError(AppException):
    """Upstream completion service answered with a non-success status."""

    def __init__(self, upstream_status: int) -> None:
        self.upstream_status = upstream_status
        super().__init__(
            message=f"Chat service error: {upstream_status}",
            code="UPSTREAM_ERROR_STATUS",
            status_code=502,
        )


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    error: dict[str, Any] = {"code": exc.code, "message": exc.message}
    if exc.details:
        error["details"] = exc.details
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": error},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body shape errors in the same envelope as AppException."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "REQUEST_VALIDATION_ERROR",
                "message": "Invalid request body",
                "details": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            },
        },
    )
