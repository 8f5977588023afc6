"""
Token refresh endpoint.

The refresh token travels in an HTTP-only cookie. A successful refresh
returns the new access token in the ``Authorization`` response header and
replaces the cookie with a rotated refresh token.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response
from sqlalchemy.orm import Session

from core.auth import REFRESH_TOKEN_EXPIRE_DAYS
from core.config import settings
from core.database import get_db
from core.exceptions import AuthenticationError
from core.response_models import APIResponse
from ..schemas.auth_schemas import AccessTokenResponse
from ..services.auth_service import AuthService

REFRESH_COOKIE_NAME = "refresh_token"

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/refresh", response_model=APIResponse[AccessTokenResponse])
async def refresh_token_endpoint(
    response: Response,
    refresh_token: Optional[str] = Cookie(None),
    db: Session = Depends(get_db),
):
    """
    Exchange the refresh token cookie for a new access token.

    The refresh token is single use; the cookie is replaced on success.
    """
    if not refresh_token:
        raise AuthenticationError("Refresh token missing")

    _, tokens = AuthService(db).refresh(refresh_token)

    response.headers["Authorization"] = f"Bearer {tokens['access_token']}"
    response.set_cookie(
        REFRESH_COOKIE_NAME,
        tokens["refresh_token"],
        max_age=REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=not settings.debug,
        samesite="strict",
        path="/",
    )

    return APIResponse(
        message="Token refreshed",
        data=AccessTokenResponse(
            access_token=tokens["access_token"],
            token_type=tokens["token_type"],
            expires_in=tokens["expires_in"],
        ),
    )
