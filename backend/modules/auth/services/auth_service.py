"""
Refresh token bookkeeping.

Every refresh token handed out is recorded by its ``jti``. A user keeps at
most ``MAX_REFRESH_TOKENS`` live tokens (one per device); issuing another
evicts the oldest. Using a refresh token deletes its row and issues a new
pair, so a replayed token is rejected.
"""

from datetime import timedelta
from typing import Dict, Any, Tuple
import logging

from sqlalchemy.orm import Session

from core.auth import (
    create_access_token,
    create_refresh_token,
    generate_token_id,
    token_claims_for,
    verify_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from core.clock import utcnow
from core.config import settings
from core.exceptions import AuthenticationError
from ..models import User, RefreshToken

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def issue_tokens(self, user: User) -> Dict[str, Any]:
        """Create an access/refresh pair and record the refresh token."""
        claims = token_claims_for(user)
        token_id = generate_token_id()

        self.db.add(
            RefreshToken(
                user_id=user.id,
                token_id=token_id,
                expires_at=utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
            )
        )
        self.db.flush()
        self._evict_excess_tokens(user.id)
        self.db.commit()

        return {
            "access_token": create_access_token(claims),
            "refresh_token": create_refresh_token(claims, token_id=token_id),
            "token_type": "bearer",
            "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    def refresh(self, refresh_token: str) -> Tuple[User, Dict[str, Any]]:
        """Exchange a refresh token for a new pair."""
        token_data = verify_token(refresh_token, token_type="refresh")
        if token_data is None:
            raise AuthenticationError("Invalid or expired refresh token")

        record = (
            self.db.query(RefreshToken)
            .filter_by(token_id=token_data.token_id, user_id=token_data.user_id)
            .first()
        )
        if record is None:
            logger.warning(
                f"Unknown refresh token presented for user {token_data.user_id}"
            )
            raise AuthenticationError("Refresh token has been revoked")

        user = record.user
        if not user.is_active:
            raise AuthenticationError("User not found or inactive")

        self.db.delete(record)
        self.db.flush()
        tokens = self.issue_tokens(user)
        logger.info(f"Rotated refresh token for user {user.id}")
        return user, tokens

    def _evict_excess_tokens(self, user_id: int):
        tokens = (
            self.db.query(RefreshToken)
            .filter_by(user_id=user_id)
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc())
            .all()
        )
        for stale in tokens[settings.max_refresh_tokens:]:
            self.db.delete(stale)
