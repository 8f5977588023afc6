"""
Double-submit cookie CSRF protection.

Safe requests receive a ``csrf-token`` cookie when they do not carry one.
State-changing requests must echo that cookie value in the ``x-csrf-token``
header.
"""

from typing import Callable, Iterable, Optional
import secrets
import logging

from fastapi import Request, Response

from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings
from .exceptions import error_response

logger = logging.getLogger(__name__)

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def generate_csrf_token() -> str:
    return secrets.token_hex(32)


class CSRFMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        cookie_name: str = settings.csrf_cookie_name,
        header_name: str = settings.csrf_header_name,
        exempt_paths: Optional[Iterable[str]] = None,
        secure_cookie: bool = not settings.debug,
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.header_name = header_name
        self.exempt_paths = tuple(exempt_paths or ())
        self.secure_cookie = secure_cookie

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cookie_token = request.cookies.get(self.cookie_name)

        if request.method in SAFE_METHODS:
            response = await call_next(request)
            if not cookie_token:
                response.set_cookie(
                    self.cookie_name,
                    generate_csrf_token(),
                    httponly=False,
                    secure=self.secure_cookie,
                    samesite="strict",
                )
            return response

        if any(request.url.path.startswith(path) for path in self.exempt_paths):
            return await call_next(request)

        header_token = request.headers.get(self.header_name)
        if (
            not cookie_token
            or not header_token
            or not secrets.compare_digest(cookie_token.encode(), header_token.encode())
        ):
            logger.warning(f"CSRF validation failed for {request.method} {request.url.path}")
            return error_response(403, "Invalid CSRF token", "CSRF_FAILED")

        return await call_next(request)
