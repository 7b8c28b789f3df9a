"""API error type and handlers producing ``{"error": message}`` bodies."""

from __future__ import annotations

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

logger = structlog.get_logger()

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing the request"


class APIError(HTTPException):
    """An error returned to the client as ``{"error": message}``."""

    def __init__(self, status_code: int, message: str) -> None:
        self.message = message
        super().__init__(status_code=status_code, detail=message)


class BadRequestError(APIError):
    """Invalid request parameters (400)."""

    def __init__(self, message: str) -> None:
        super().__init__(status_code=HTTP_400_BAD_REQUEST, message=message)


async def api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an APIError."""
    assert isinstance(exc, APIError)  # noqa: S101
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any unhandled exception as a generic 500."""
    logger.error(
        "api_unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": UNEXPECTED_ERROR_MESSAGE},
    )
