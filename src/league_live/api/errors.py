"""
Unified error handling for consistent API error responses.

Every error response uses the same envelope as successful ones:
{
    "success": false,
    "message": "Human-readable message",
    "error": "Optional additional context"
}

Domain errors raised below the API (league_live.errors) are mapped onto
status codes here; store details are never included.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import (
    Conflict,
    InvalidInput,
    LeagueError,
    NotFound,
    ReferenceMissing,
    StoreError,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error class for consistent error responses."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        detail: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.message = message
        self.error_detail = detail
        super().__init__(
            status_code=status_code,
            detail={"code": code, "message": message, "detail": detail},
            headers=headers,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=404,
            code="NOT_FOUND",
            message=f"{resource} not found",
            detail=f"{resource} with ID {identifier}",
        )


class ServiceUnavailableError(APIError):
    """Backing service unavailable (503)."""

    def __init__(self, service: str, message: str | None = None):
        super().__init__(
            status_code=503,
            code="SERVICE_UNAVAILABLE",
            message=message or f"{service} is currently unavailable",
        )


# Domain error -> (status code, error code)
DOMAIN_ERROR_STATUS: dict[type[LeagueError], tuple[int, str]] = {
    InvalidInput: (400, "VALIDATION_ERROR"),
    ReferenceMissing: (400, "REFERENCE_MISSING"),
    NotFound: (404, "NOT_FOUND"),
    Conflict: (409, "CONFLICT"),
    StoreUnavailable: (503, "SERVICE_UNAVAILABLE"),
    StoreError: (500, "DATABASE_ERROR"),
}


def error_envelope(message: str, error: str | None = None) -> dict[str, Any]:
    content: dict[str, Any] = {"success": False, "message": message}
    if error:
        content["error"] = error
    return content


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Converts APIError exceptions to envelope responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.error_detail),
        headers=exc.headers,
    )


async def league_error_handler(request: Request, exc: LeagueError) -> JSONResponse:
    """Map a domain error onto its status code."""
    status_code, code = 500, "INTERNAL_ERROR"
    for error_type, mapped in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, code = mapped
            break

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=status_code,
        content=error_envelope(exc.message, exc.detail or code),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field as a 400."""
    errors = exc.errors()
    error = None
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        error = f"{location}: {first.get('msg')}" if location else first.get("msg")
    return JSONResponse(status_code=400, content=error_envelope("Validation error", error))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework HTTP errors (unknown route, bad method) in envelope form."""
    if exc.status_code == 404:
        message = f"Route {request.url.path} not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )
