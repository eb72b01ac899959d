# memelinks/middleware/error_handler.py
# Structured error handling middleware
# Catches unhandled exceptions and returns consistent JSON responses

import traceback
import logging
from datetime import datetime, timezone
from typing import Callable
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from memelinks.observability.logger import log_exception

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error with structured response."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class ValidationError(AppError):
    """Missing, oversized or malformed input."""
    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class AuthError(AppError):
    """Missing or invalid session token / API key."""
    def __init__(self, message: str = "Unauthorized", details: dict = None):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=401,
            details=details
        )


class NotFoundError(AppError):
    """Resource not found."""
    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details
        )


class ConflictError(AppError):
    """Unique constraint hit, e.g. a link that was already submitted."""
    def __init__(self, message: str = "Conflict", details: dict = None):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=409,
            details=details
        )


class StateMismatchError(AppError):
    """Caller's view of a record disagrees with the stored record."""
    def __init__(self, message: str = "Record state mismatch", details: dict = None):
        super().__init__(
            message=message,
            error_code="STATE_MISMATCH",
            status_code=400,
            details=details
        )


class StorageError(AppError):
    """Database operation failed. The message is always generic."""
    def __init__(self, message: str = "Database operation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            status_code=500,
            details=details
        )


class RateLimitError(AppError):
    """Rate limit exceeded."""
    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Rate limit exceeded. Retry after {retry_after} seconds.",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            details={"retry_after": retry_after}
        )


def create_error_response(
    error_code: str,
    message: str,
    status_code: int,
    details: dict = None,
    request_id: str = None,
    headers: dict = None
) -> JSONResponse:
    """Create a standardized JSON error response."""
    content = {
        "error": {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }

    if details:
        content["error"]["details"] = details

    if request_id:
        content["error"]["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _log_app_error(e: AppError, request: Request, request_id: str = None) -> None:
    extra = {"request_id": request_id, "path": request.url.path}
    if e.status_code >= 500:
        logger.error(f"AppError: {e.error_code} - {e.message}", extra=extra)
    else:
        logger.warning(f"AppError: {e.error_code} - {e.message}", extra=extra)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and returns
    consistent JSON error responses.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable):
        # Generate request ID for tracing
        request_id = request.headers.get("X-Request-ID", str(id(request)))

        try:
            response = await call_next(request)
            return response

        except AppError as e:
            # Known application errors
            _log_app_error(e, request, request_id)
            return create_error_response(
                error_code=e.error_code,
                message=e.message,
                status_code=e.status_code,
                details=e.details,
                request_id=request_id
            )

        except Exception as e:
            # Unhandled exceptions
            error_details = None
            if self.debug:
                error_details = {
                    "type": type(e).__name__,
                    "traceback": traceback.format_exc()
                }

            log_exception(e, context=f"Unhandled error on {request.url.path}")

            return create_error_response(
                error_code="INTERNAL_ERROR",
                message="An internal error occurred. Please try again later.",
                status_code=500,
                details=error_details,
                request_id=request_id
            )


def setup_exception_handlers(app):
    """Register exception handlers on FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        _log_app_error(exc, request)
        return create_error_response(
            error_code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies are client errors like any other bad input
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        return create_error_response(
            error_code="VALIDATION_ERROR",
            message="Invalid request",
            status_code=400,
            details={"fields": fields}
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return create_error_response(
            error_code="HTTP_ERROR",
            message=str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None)
        )
