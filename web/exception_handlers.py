"""RFC 7807 Problem Details exception handlers for FastAPI."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException

from src.core.exceptions import (
    BookingBotError,
    DatabaseError,
    ValidationError,
)

_ERROR_TYPES = {
    400: "urn:therapyslotbot:error:bad-request",
    404: "urn:therapyslotbot:error:not-found",
    409: "urn:therapyslotbot:error:conflict",
    422: "urn:therapyslotbot:error:validation",
    500: "urn:therapyslotbot:error:internal-server",
    503: "urn:therapyslotbot:error:service-unavailable",
}

_ERROR_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    422: "Validation Error",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _problem(request: Request, status_code: int, detail: str, **extra) -> JSONResponse:
    content = {
        "type": _ERROR_TYPES.get(status_code, f"urn:therapyslotbot:error:http-{status_code}"),
        "title": _ERROR_TITLES.get(status_code, "Error"),
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
    }
    content.update(extra)
    return JSONResponse(
        status_code=status_code, content=content, media_type="application/problem+json"
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert FastAPI HTTPException to RFC 7807 Problem Details format."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _problem(request, exc.status_code, detail)
    for key, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[key] = value
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert Pydantic validation errors to RFC 7807 format."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]
    return _problem(request, 422, "Request validation failed", errors=errors)


async def booking_bot_error_handler(request: Request, exc: BookingBotError) -> JSONResponse:
    """Map application errors to Problem Details responses."""
    if isinstance(exc, ValidationError):
        status_code = 400
    elif isinstance(exc, DatabaseError):
        status_code = 503
    else:
        status_code = 500

    if status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    error = exc.to_dict()
    return _problem(
        request,
        status_code,
        exc.message,
        error=error["error"],
        recoverable=error["recoverable"],
    )
