"""
Route dependencies resolving the caller's participant or coach profile.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.auth import CurrentUser, get_current_user
from core.database import get_db
from core.exceptions import PermissionDeniedError
from .models import ParticipantProfile, CoachProfile


async def get_current_participant(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ParticipantProfile:
    profile = db.query(ParticipantProfile).filter_by(user_id=current_user.id).first()
    if profile is None:
        raise PermissionDeniedError("Participant profile required")
    return profile


async def get_current_coach(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CoachProfile:
    profile = db.query(CoachProfile).filter_by(user_id=current_user.id).first()
    if profile is None:
        raise PermissionDeniedError("Coach profile required")
    return profile
