"""
Client-side session: the current access token and when to refresh it.

The session owns its clock so expiry decisions can be tested without
waiting for real tokens to age.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import JWTError, jwt

from core.clock import SystemClock

logger = logging.getLogger(__name__)


def _token_expiry(token: str) -> Optional[datetime]:
    """Read ``exp`` without verifying the signature; the server does that."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        logger.warning("Received an access token that is not a JWT")
        return None

    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc).replace(tzinfo=None)


class SessionState:
    """Access token held by one client, with its expiry."""

    def __init__(self, clock=None):
        self.clock = clock or SystemClock()
        self.access_token: Optional[str] = None
        self.expires_at: Optional[datetime] = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def set_access_token(self, token: Optional[str]):
        if not token:
            self.clear()
            return
        self.access_token = token
        self.expires_at = _token_expiry(token)

    def clear(self):
        self.access_token = None
        self.expires_at = None

    def remaining(self) -> Optional[timedelta]:
        if self.expires_at is None:
            return None
        return self.expires_at - self.clock.now()

    def is_expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= timedelta(0)


class RefreshPolicy:
    """Refresh once the access token has less than ``margin`` left."""

    def __init__(self, margin: timedelta = timedelta(minutes=1)):
        self.margin = margin

    def should_refresh(self, session: SessionState) -> bool:
        if not session.is_authenticated:
            return False
        remaining = session.remaining()
        return remaining is not None and remaining < self.margin
