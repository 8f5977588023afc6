"""
JWT authentication for the SportEvents API.

Access tokens are short lived and travel in the ``Authorization: Bearer``
header. When a request arrives with a token close to expiry the response
carries a fresh one in the same header (see ``core.token_rotation``).
Refresh tokens are longer lived, tracked in the database and rotated on
every use.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List
import secrets
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .config import settings
from .clock import utcnow
from .database import get_db
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ALGORITHM = settings.jwt_algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: int
    username: Optional[str] = None
    roles: List[str] = []
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None


class CurrentUser(BaseModel):
    """Authenticated caller as seen by route handlers."""

    id: int
    username: str
    email: str
    roles: List[str]
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles


def generate_token_id() -> str:
    """Generate a unique token ID for tracking."""
    return secrets.token_urlsafe(32)


def _secret_for(token_type: str) -> str:
    return settings.refresh_secret if token_type == "refresh" else settings.jwt_secret_key


def token_claims_for(user) -> dict:
    """Claims shared by access and refresh tokens for a user row."""
    return {
        "sub": str(user.id),
        "username": user.username,
        "roles": [user.role.value],
    }


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    issued_at = utcnow()
    expire = issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update(
        {
            "exp": expire.replace(tzinfo=timezone.utc),
            "iat": int(issued_at.replace(tzinfo=timezone.utc).timestamp()),
            "type": "access",
            "jti": generate_token_id(),
            "iss": settings.jwt_issuer,
        }
    )
    return jwt.encode(to_encode, _secret_for("access"), algorithm=ALGORITHM)


def create_refresh_token(data: dict, token_id: Optional[str] = None) -> str:
    """Create a JWT refresh token with longer expiration."""
    to_encode = data.copy()
    issued_at = utcnow()
    expire = issued_at + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)

    to_encode.update(
        {
            "exp": expire.replace(tzinfo=timezone.utc),
            "iat": int(issued_at.replace(tzinfo=timezone.utc).timestamp()),
            "type": "refresh",
            "jti": token_id or generate_token_id(),
            "iss": settings.jwt_issuer,
        }
    )
    return jwt.encode(to_encode, _secret_for("refresh"), algorithm=ALGORITHM)


def verify_token(token: str, token_type: str = "access") -> Optional[TokenData]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        token_type: Expected token type ("access" or "refresh")

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[ALGORITHM],
            issuer=settings.jwt_issuer,
            options={"require_exp": True, "require_iat": True},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Token has expired")
        return None
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(
            f"Token type mismatch: expected {token_type}, got {payload.get('type')}"
        )
        return None

    try:
        user_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        return None

    return TokenData(
        user_id=user_id,
        username=payload.get("username"),
        roles=payload.get("roles", []),
        token_id=payload.get("jti"),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(
            tzinfo=None
        ),
    )


def needs_rotation(token_data: TokenData, now: Optional[datetime] = None) -> bool:
    """True when an access token is inside its rotation window."""
    if token_data.expires_at is None:
        return False
    now = now or utcnow()
    window = timedelta(minutes=settings.token_rotation_window_minutes)
    return token_data.expires_at - now <= window


def rotate_access_token(token_data: TokenData) -> str:
    """Issue a fresh access token carrying the same identity claims."""
    return create_access_token(
        {
            "sub": str(token_data.user_id),
            "username": token_data.username,
            "roles": token_data.roles,
        }
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user from the bearer token."""
    from modules.auth.models import User

    if credentials is None:
        raise AuthenticationError("Not authenticated")

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError("Could not validate credentials")

    user = db.query(User).filter_by(id=token_data.user_id).first()
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        roles=[user.role.value],
        is_active=user.is_active,
    )
