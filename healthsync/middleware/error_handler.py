"""
Exception handlers.

Every failure is rendered as ``{"ok": false, "error": ..., "code": ..., "path": ...}``
where ``error`` is a human readable message and ``code`` names the failure kind.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

from healthsync.core.exceptions import AppException, ValidationException
from healthsync.schemas.validation import error_messages

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BadRequest",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_405_METHOD_NOT_ALLOWED: "MethodNotAllowed",
}


def error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    **extra: object,
) -> JSONResponse:
    """Build the failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "ok": False,
            "error": message,
            "code": code,
            "path": request.url.path,
            **extra,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions raised by services and dependencies."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("request_error", path=request.url.path, error=exc.message)

    extra = {}
    if isinstance(exc, ValidationException) and exc.errors:
        extra["details"] = exc.errors

    return error_response(
        request,
        exc.status_code,
        exc.message,
        exc.__class__.__name__.removesuffix("Exception"),
        **extra,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions raised by the framework (unknown routes, bearer auth)."""
    return error_response(
        request,
        exc.status_code,
        str(exc.detail),
        HTTP_ERROR_CODES.get(exc.status_code, "HTTPError"),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors as bad input, listing every violation."""
    details = error_messages(exc.errors())
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "; ".join(details) or "Request validation failed",
        "Validation",
        details=details,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "InternalServerError",
    )
