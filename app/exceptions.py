# =============================================================================
# app/exceptions.py - Error Taxonomy and Error Envelope
# =============================================================================
# Centralized exception handling for the API.
#
# Every failure that leaves a pipeline stage or a route handler ends up as
# one JSON envelope:
#
#   {"success": false, "error": "<human readable message>"}
#
# Foreign exceptions (database, validation, Starlette HTTP errors) are
# translated into ApiError subclasses by translate_exception().
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError as DatabaseAPIError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Postgres error codes surfaced by the database API
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"
UNDEFINED_COLUMN = "42703"
# PostgREST could not parse the filter, select or order parameters
QUERY_PARSE_ERROR = "PGRST100"


class ApiError(Exception):
    """
    Base exception for the API.

    All custom exceptions inherit from this class. Carries the HTTP status
    and any extra response headers the error needs (Retry-After, ...).
    """

    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the error envelope."""
        return {"success": False, "error": self.message}


class MalformedBodyError(ApiError):
    """Raised when a structured request body cannot be parsed."""

    status_code = 400
    default_message = "Malformed request body"


class ValidationError(ApiError):
    """Raised when input is well formed but not acceptable."""

    status_code = 400
    default_message = "Validation failed"


class AuthError(ApiError):
    """Raised when a request is not authenticated."""

    status_code = 401
    default_message = "Not authorized to access this route"


class ForbiddenError(ApiError):
    """Raised when an authenticated user lacks the required role."""

    status_code = 403
    default_message = "Not allowed to access this route"


class NotFoundError(ApiError):
    """Raised when a resource or route doesn't exist."""

    status_code = 404
    default_message = "Resource not found"


class PayloadTooLargeError(ApiError):
    """Raised when a request body exceeds the configured limit."""

    status_code = 413
    default_message = "Request body too large"


class TooManyRequestsError(ApiError):
    """Raised by the rate limiter once a client exhausts its window."""

    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, retry_after: int, message: str | None = None):
        super().__init__(message, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


class UnknownError(ApiError):
    """Catch-all for failures with no better classification."""

    status_code = 500


# =============================================================================
# Translation
# =============================================================================

def _format_validation_errors(errors: list[dict[str, Any]]) -> str:
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


def _translate_database_error(exc: DatabaseAPIError) -> ApiError:
    if exc.code == UNIQUE_VIOLATION:
        return ValidationError("Duplicate field value entered")
    if exc.code == INVALID_TEXT_REPRESENTATION:
        return NotFoundError("Resource not found")
    if exc.code in (NOT_NULL_VIOLATION, CHECK_VIOLATION):
        return ValidationError(exc.message or ValidationError.default_message)
    if exc.code in (UNDEFINED_COLUMN, QUERY_PARSE_ERROR):
        return ValidationError(exc.message or "Invalid query parameter")
    return UnknownError(exc.message or UnknownError.default_message)


def translate_exception(exc: BaseException, production: bool = True) -> ApiError:
    """
    Map any exception onto the ApiError taxonomy.

    Args:
        exc: The exception raised by a stage or handler
        production: Hide the message of unknown errors when True

    Returns:
        ApiError: An error with a status code and a client-safe message
    """
    if isinstance(exc, ApiError):
        return exc

    if isinstance(exc, DatabaseAPIError):
        translated = _translate_database_error(exc)
        if production and isinstance(translated, UnknownError):
            return UnknownError()
        return translated

    if isinstance(exc, (RequestValidationError, PydanticValidationError)):
        return ValidationError(_format_validation_errors(list(exc.errors())))

    if isinstance(exc, StarletteHTTPException):
        return ApiError(
            message=str(exc.detail),
            status_code=exc.status_code,
            headers=dict(exc.headers or {}),
        )

    if production:
        return UnknownError()
    return UnknownError(str(exc) or None)


def error_response(error: ApiError) -> JSONResponse:
    """Serialize an ApiError into the JSON error envelope."""
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_dict(),
        headers=error.headers or None,
    )


def log_error(error: ApiError, exc: BaseException, method: str, path: str) -> None:
    """Log a handled error; server errors keep their traceback."""
    if error.status_code >= 500:
        logger.error(
            f"Error: {exc} ({method} {path})",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.warning(f"{error.status_code} {method} {path}: {error.message}")


# =============================================================================
# Exception Handlers
# =============================================================================

async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert route-level HTTP and validation errors to the error envelope.

    Registered for Starlette's HTTPException (unmatched routes, 405s) and for
    FastAPI's RequestValidationError; everything else propagates to the
    error handling stage.
    """
    production = request.app.state.settings.is_production
    error = translate_exception(exc, production=production)
    log_error(error, exc, request.method, request.url.path)
    return error_response(error)
