"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    kind = "app_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedException(AppException):
    """Raised when there is no valid actor session."""

    status_code = 401
    kind = "unauthenticated"


class ForbiddenException(AppException):
    """Raised when the actor's role is below the required level."""

    status_code = 403
    kind = "forbidden"


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    kind = "not_found"


class InvalidStateException(AppException):
    """Raised when a transition precondition does not hold."""

    status_code = 400
    kind = "invalid_state"


class InvalidInputException(AppException):
    """Raised when request input violates its contract."""

    status_code = 400
    kind = "invalid_input"


class ConflictException(AppException):
    """Raised when a uniqueness constraint would be violated."""

    status_code = 409
    kind = "conflict"


class UnavailableException(AppException):
    """Raised on transient data store failures; safe to retry."""

    status_code = 503
    kind = "unavailable"


class InternalException(AppException):
    """Raised on unexpected internal failures."""

    status_code = 500
    kind = "internal"


_HTTP_STATUS_KINDS = {
    400: InvalidInputException.kind,
    401: UnauthenticatedException.kind,
    403: ForbiddenException.kind,
    404: NotFoundException.kind,
    405: InvalidInputException.kind,
    409: ConflictException.kind,
    503: UnavailableException.kind,
}


def error_body(kind: str, message: str) -> dict:
    """Unified error envelope."""
    return {"success": False, "error": {"kind": kind, "message": message}}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid value"))
    return f"{location}: {message}" if location else message


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    kind = _HTTP_STATUS_KINDS.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(kind, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Shape/schema violations are rejected at the boundary."""
    return JSONResponse(
        status_code=400,
        content=error_body(InvalidInputException.kind, _validation_message(exc)),
    )


async def integrity_error_handler(_: Request, exc: IntegrityError) -> JSONResponse:
    """Uniqueness races that slipped past service checks."""
    logger.warning("Integrity error: %s", exc.orig)
    return JSONResponse(
        status_code=409,
        content=error_body(ConflictException.kind, "Resource conflicts with an existing record"),
    )


async def unavailable_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Transient store failures are reported as retryable."""
    logger.warning("Data store unavailable: %s", exc)
    return JSONResponse(
        status_code=503,
        content=error_body(UnavailableException.kind, "Data store is temporarily unavailable"),
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content=error_body(InternalException.kind, "Internal server error"),
    )


def register_exception_handlers(app) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(OperationalError, unavailable_error_handler)
    app.add_exception_handler(PoolTimeoutError, unavailable_error_handler)
    app.add_exception_handler(TimeoutError, unavailable_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
