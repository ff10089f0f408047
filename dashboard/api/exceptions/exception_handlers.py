"""
Exception handlers that turn client errors into dashboard responses.

Session expiry becomes a single redirect to the login page; every other
failure is rendered as ``application/problem+json``.
"""

from typing import Optional

import httpx
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dashboard.client.errors import ApiError, ErrorKind
from dashboard.client.http_client import PROBLEM_CONTENT_TYPE
from dashboard.core.logging import get_logger

logger = get_logger(__name__)

# Constants for sanitized error messages
INVALID_REQUEST_MSG = "Invalid request data"
UPSTREAM_UNAVAILABLE_MSG = "Detector service unavailable"
UPSTREAM_INVALID_MSG = "Unexpected response from detector service"
INTERNAL_ERROR_MSG = "Internal server error"


def problem_response(
    request: Request,
    status_code: int,
    title: str,
    detail: Optional[str] = None,
) -> JSONResponse:
    """Build an RFC 7807 problem response."""
    content = {
        "type": "about:blank",
        "title": title,
        "status": status_code,
        "instance": request.url.path,
    }
    if detail:
        content["detail"] = detail
    return JSONResponse(
        status_code=status_code,
        content=content,
        media_type=PROBLEM_CONTENT_TYPE,
    )


async def api_error_handler(request: Request, exc: ApiError):
    """
    Handle errors raised by the detector API client.

    Only the error that first invalidated the session carries a redirect
    target, so concurrent 401s produce at most one redirect.
    """
    status_code = exc.status or status.HTTP_502_BAD_GATEWAY

    match exc.kind:
        case ErrorKind.UNAUTHENTICATED:
            if exc.redirect_to:
                logger.info("redirect_to_login", path=request.url.path, target=exc.redirect_to)
                return RedirectResponse(exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
            return problem_response(request, status.HTTP_401_UNAUTHORIZED, "Unauthorized")
        case ErrorKind.PROBLEM:
            title = exc.problem.title if exc.problem and exc.problem.title else "Request failed"
            return problem_response(request, status_code, title, exc.display_message)
        case ErrorKind.HTTP:
            return problem_response(request, status_code, "Request failed", exc.display_message)


async def transport_error_handler(request: Request, exc: httpx.TransportError) -> JSONResponse:
    """Handle network failures talking to the detector service."""
    logger.error(
        "upstream_transport_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return problem_response(
        request, status.HTTP_502_BAD_GATEWAY, "Bad Gateway", UPSTREAM_UNAVAILABLE_MSG
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException (unknown routes, wrong methods) as problem details."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        detail=exc.detail,
    )
    return problem_response(request, exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation errors."""
    logger.warning(
        "validation_exception",
        path=request.url.path,
        method=request.method,
        errors=exc.errors(),
    )
    return problem_response(
        request,
        422,
        "Unprocessable Entity",
        INVALID_REQUEST_MSG,
    )


async def upstream_validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """
    Handle detector responses that do not match the expected schema.

    Returns a sanitized message - does not expose internal validation details.
    """
    logger.error(
        "upstream_validation_error",
        path=request.url.path,
        method=request.method,
        errors=str(exc),
    )
    return problem_response(
        request, status.HTTP_502_BAD_GATEWAY, "Bad Gateway", UPSTREAM_INVALID_MSG
    )


async def value_error_exception_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle ValueError raised by dashboard services for bad user input."""
    logger.warning(
        "value_error_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return problem_response(request, status.HTTP_400_BAD_REQUEST, "Bad Request", str(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with standardized error response.

    Returns 500 Internal Server Error.
    """
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        INTERNAL_ERROR_MSG,
    )


def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI app.
    """
    # Detector client errors
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(httpx.TransportError, transport_error_handler)

    # Standard FastAPI exceptions
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Detector responses that failed schema validation
    app.add_exception_handler(ValidationError, upstream_validation_error_handler)

    # Standard Python exceptions
    app.add_exception_handler(ValueError, value_error_exception_handler)

    # Catch-all for any other exceptions
    app.add_exception_handler(Exception, generic_exception_handler)
