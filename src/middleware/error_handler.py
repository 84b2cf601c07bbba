"""Exception handlers for the operator API.

Every error response uses the ``ErrorResponse`` envelope from
``src.schemas.common``.  Register with ``app.add_exception_handler``.
"""

import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.errors import InfrastructureError
from src.schemas.common import ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _code_for_status(status_code: int) -> str:
    """Return the error code string for *status_code*, falling back to ``HTTP_{code}``."""
    return _STATUS_TO_CODE.get(status_code, f"HTTP_{status_code}")


def _envelope(status_code: int, error: ErrorCode, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert ``HTTPException`` to the standard envelope, keeping its headers."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(
        exc.status_code,
        ErrorCode(code=_code_for_status(exc.status_code), message=detail),
        headers=dict(exc.headers) if exc.headers else None,
    )


async def infrastructure_error_handler(
    request: Request, exc: InfrastructureError
) -> JSONResponse:
    """Storage unreachable: 503 so operators can tell it apart from a bug."""
    logger.error("Infrastructure failure on %s %s: %s", request.method, request.url.path, exc)
    return _envelope(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode(code="SERVICE_UNAVAILABLE", message=str(exc)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the full traceback; return only a generic ``INTERNAL_ERROR`` to the client."""
    logger.error(
        "Unhandled %s on %s %s\n%s",
        type(exc).__name__,
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode(code="INTERNAL_ERROR", message="An internal server error occurred"),
    )
