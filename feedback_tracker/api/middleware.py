"""API middleware - CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and
conversion of ``FeedbackTrackerError`` subclasses into JSON
``ErrorResponse`` bodies with the matching status code.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)  # added 2nd → outer
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# RequestLoggingMiddleware therefore records the final status code, after
# ErrorHandling has turned an exception into a JSON error.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from feedback_tracker.api.schemas import ErrorResponse
from feedback_tracker.utils.errors import (
    FeedbackTrackerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from feedback_tracker.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_GENERIC_ERROR_MESSAGE = "Something went wrong on our end!"
_ROUTE_NOT_FOUND_MESSAGE = "Route not found"

# Checked in order; the first matching class decides the status code.
_STATUS_BY_ERROR: tuple[tuple[type[FeedbackTrackerError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (PersistenceError, 500),
)


def status_for_error(exc: FeedbackTrackerError) -> int:
    """Return the HTTP status code for a domain error (500 if unmapped)."""
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return 500


def error_response(status_code: int, error: str, kind: str | None = None) -> JSONResponse:
    """Build a JSON ``ErrorResponse`` with the given status code."""
    body = ErrorResponse(error=error, kind=kind)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, cors_config: dict[str, Any] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    cors_config:
        The ``cors`` section of the loaded config (``allowed_origins``,
        ``allowed_methods``, ``allowed_headers``).  Any origin, the five
        verbs the API uses, and Content-Type/Authorization by default.
    """
    cors_config = cors_config or {}
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.get("allowed_origins", ["*"]),
        allow_methods=cors_config.get(
            "allowed_methods", ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
        ),
        allow_headers=cors_config.get("allowed_headers", ["Content-Type", "Authorization"]),
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert exceptions raised by route handlers into JSON error bodies.

    ``FeedbackTrackerError`` subclasses keep their human-readable message
    and kind.  Anything else becomes a generic 500; the stack trace is
    logged server-side only and never sent to the client.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except FeedbackTrackerError as exc:
            status_code = status_for_error(exc)
            log = _logger.error if status_code >= 500 else _logger.info
            log(
                "application_error",
                error_type=type(exc).__name__,
                kind=exc.kind,
                message=exc.message,
                provider=exc.provider_name,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
                path=str(request.url.path),
                status=status_code,
            )
            return error_response(status_code, exc.message, exc.kind)
        except Exception:
            _logger.exception(
                "unhandled_exception",
                method=request.method,
                path=str(request.url.path),
            )
            return error_response(500, _GENERIC_ERROR_MESSAGE)


# ---------------------------------------------------------------------------
# Framework-level exception handlers
# ---------------------------------------------------------------------------


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed JSON bodies with 400 instead of FastAPI's 422."""
    _logger.info(
        "malformed_request",
        path=str(request.url.path),
        errors=len(exc.errors()),
    )
    return error_response(400, "Request body is malformed.", "MalformedRequest")


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer unknown routes and methods with the API's own 404 body."""
    if exc.status_code in (404, 405):
        _logger.info("route_not_found", method=request.method, path=str(request.url.path))
        return error_response(404, _ROUTE_NOT_FOUND_MESSAGE)
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the request-validation and routing handlers on *app*."""
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
