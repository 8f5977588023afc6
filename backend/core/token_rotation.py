"""
Access token rotation.

If a request authenticates with a valid access token that expires within
the rotation window, the response carries a replacement token in its
``Authorization`` header. Clients adopt it for subsequent calls.
"""

from typing import Callable
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .auth import verify_token, needs_rotation, rotate_access_token

logger = logging.getLogger(__name__)

ROTATED_TOKEN_HEADER = "Authorization"


class TokenRotationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token or response.status_code == 401:
            return response

        token_data = verify_token(token)
        if token_data is not None and needs_rotation(token_data):
            response.headers[ROTATED_TOKEN_HEADER] = f"Bearer {rotate_access_token(token_data)}"
            logger.debug(f"Rotated access token for user {token_data.user_id}")

        return response
