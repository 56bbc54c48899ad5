"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses. Every error body has the same shape:
``{"error": <status code>, "message": <text>}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import UploaderException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "FORBIDDEN": 403,
    "RESOURCE_NOT_FOUND": 404,
    "STORAGE_NOT_FOUND": 404,
    "PAYLOAD_TOO_LARGE": 413,
    "STORAGE_CONFIGURATION_ERROR": 500,
    "STORAGE_BACKEND_ERROR": 500,
    "STORAGE_UPLOAD_ERROR": 500,
    "STORAGE_DOWNLOAD_ERROR": 500,
    "STORAGE_DELETE_ERROR": 500,
    "STORAGE_PERMISSION_ERROR": 500,
    "METADATA_DELETE_ERROR": 500,
}


def error_response(status: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """JSON error body with the numeric status mirrored in ``error``."""
    return JSONResponse(
        status_code=status,
        content={"error": status, "message": message},
        headers=headers,
    )


def _uploader_exception_handler(request: Request, exc: UploaderException) -> JSONResponse:
    """Return JSON for UploaderException with the status for its error_code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 500)
    if status >= 500:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message, extra=exc.details)
    return error_response(status, exc.message)


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 naming the first invalid field."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
        message = f"Invalid {loc}: {first.get('msg', 'invalid value')}" if loc else first.get("msg", "")
    else:
        message = "Request validation failed"
    return error_response(400, message)


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with retry-after set to the limit window."""
    retry_after = max(1, int(exc.limit.limit.get_expiry()))
    return error_response(429, "Too many requests", headers={"retry-after": str(retry_after)})


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail = str(exc) if settings.debug else "Internal server error"
    return error_response(500, detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: UploaderException (and
    subclasses, including storage errors), RequestValidationError,
    StarletteHTTPException, RateLimitExceeded, generic Exception.
    """
    app.add_exception_handler(UploaderException, _uploader_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
