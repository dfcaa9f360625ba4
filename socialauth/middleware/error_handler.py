"""
Global error handling untuk SocialAuth.
Memetakan ErrorKind ke HTTP status dan merender semua error dengan format yang sama.
"""

from typing import Callable, Optional, Dict, Any
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialauth.core.config import settings
from socialauth.core.exceptions import AuthError, ErrorKind


logger = logging.getLogger("socialauth.error")

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
}


def create_error_response(
    request: Request,
    status_code: int,
    message: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Create standardized error response.

    Args:
        request: Request object
        status_code: HTTP status code
        message: Error message
        error_type: Type of error
        details: Additional error details
        headers: Extra response headers

    Returns:
        JSON error response
    """
    content = {
        "error": {
            "message": message,
            "type": error_type,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        }
    }

    response_headers = {
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-store"
    }
    if headers:
        response_headers.update(headers)

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=response_headers
    )


def log_error(request: Request, error: Exception, status_code: int) -> None:
    log_entry = {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if status_code >= 500:
        logger.error(log_entry, exc_info=error)
    else:
        logger.warning(log_entry)


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    log_error(request, exc, status_code)

    headers = None
    if exc.kind is ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return create_error_response(
        request,
        status_code=status_code,
        message=exc.message,
        error_type=exc.kind.value,
        details=exc.details,
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return create_error_response(
        request,
        status_code=exc.status_code,
        message=str(exc.detail),
        error_type="HTTPException",
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    log_error(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY)
    return create_error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation failed",
        error_type="ValidationError",
        details={"validation_errors": errors}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Pasang handler untuk AuthError, HTTPException, dan validation errors."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Last-resort handler untuk exception yang tidak tertangani.
    Semua yang lolos dari exception handlers dikembalikan sebagai 500.
    """

    def __init__(self, app: ASGIApp, debug: Optional[bool] = None):
        super().__init__(app)
        self.debug = debug if debug is not None else settings.DEBUG

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except AuthError as exc:
            return await auth_error_handler(request, exc)
        except Exception as exc:
            log_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR)
            message = str(exc) if self.debug else "An internal server error occurred"
            return create_error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=message,
                error_type="InternalServerError"
            )
