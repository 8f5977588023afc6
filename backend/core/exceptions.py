"""
Custom exceptions and handlers for consistent API error responses.

Every failure leaves the API as the same envelope::

    {"success": false, "error": "<message>", "error_code": "<CODE>"}

Services raise the ``APIError`` subclasses below; the handlers registered
by ``register_exception_handlers`` render them, along with framework
validation errors, integrity violations and anything unexpected.
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional
import logging

from .config import settings

logger = logging.getLogger(__name__)

HTTP_MESSAGES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    405: "Method not allowed",
    409: "Conflict",
    422: "Unprocessable entity",
    429: "Too many requests",
    500: "Internal server error",
}


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status_code,
            detail=detail or HTTP_MESSAGES.get(status_code, "Error"),
            headers=headers,
        )
        self.error_code = error_code


class NotFoundError(APIError):
    """Resource not found error"""

    def __init__(
        self, detail: str = "Resource not found", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ValidationError(APIError):
    """Validation error"""

    def __init__(
        self, detail: str = "Validation failed", error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class AuthenticationError(APIError):
    """Authentication error"""

    def __init__(
        self, detail: str = "Authentication failed", error_code: str = "AUTH_FAILED"
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(APIError):
    """Permission denied error"""

    def __init__(
        self, detail: str = "Permission denied", error_code: str = "PERMISSION_DENIED"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN, detail=detail, error_code=error_code
        )


class ConflictError(APIError):
    """Resource conflict error"""

    def __init__(self, detail: str = "Resource conflict", error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT, detail=detail, error_code=error_code
        )


class InvalidTransitionError(ConflictError):
    """A reservation cannot move from its current state to the requested one"""

    def __init__(self, current: str, target: str, detail: Optional[str] = None):
        super().__init__(
            detail=detail or f"Cannot move reservation from {current} to {target}",
            error_code="INVALID_TRANSITION",
        )
        self.current = current
        self.target = target


def error_response(
    status_code: int,
    message: str,
    error_code: Optional[str] = None,
    headers: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    content = {"success": False, "error": message}
    if error_code:
        content["error_code"] = error_code
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    if exc.status_code >= 500:
        logger.error(f"APIError at {request.url.path}: {exc.detail}")
    return error_response(exc.status_code, exc.detail, exc.error_code, exc.headers)


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors (404 routes, 405 methods, bearer failures)"""
    message = exc.detail if isinstance(exc.detail, str) else None
    return error_response(
        exc.status_code,
        message or HTTP_MESSAGES.get(exc.status_code, "Error"),
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Collapse pydantic validation errors into a single 400 message"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        msg = error.get("msg", "Invalid value")
        messages.append(f"{location}: {msg}" if location else msg)

    logger.warning(f"Validation failed at {request.url.path}: {messages}")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "; ".join(messages) or "Validation failed",
        "VALIDATION_ERROR",
    )


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    """Convert ValueError to consistent API response"""
    logger.warning(f"ValueError at {request.url.path}: {str(exc)}")
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc), "VALIDATION_ERROR")


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique constraint races surface as conflicts"""
    logger.warning(f"IntegrityError at {request.url.path}: {exc.orig}")
    return error_response(
        status.HTTP_409_CONFLICT, "Resource already exists", "CONFLICT"
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error at {request.url.path}")
    message = str(exc) if settings.debug else HTTP_MESSAGES[500]
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, message or HTTP_MESSAGES[500], "INTERNAL_ERROR"
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(ValueError, handle_value_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
