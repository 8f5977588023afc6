# backend/modules/profiles/services/profile_service.py

from typing import Optional
import logging

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, PermissionDeniedError, NotFoundError
from modules.auth.models import User
from modules.reference.models import Sport, SportGoal
from modules.reference.services import ReferenceDataService
from ..models import ParticipantProfile, CoachProfile
from ..schemas.profile_schemas import ParticipantProfileCreate, ParticipantProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    """Participant and coach profile management"""

    def __init__(self, db: Session):
        self.db = db
        self.reference = ReferenceDataService(db)

    def get_participant_profile(self, user_id: int) -> Optional[ParticipantProfile]:
        return self.db.query(ParticipantProfile).filter_by(user_id=user_id).first()

    def get_coach_profile(self, user_id: int) -> Optional[CoachProfile]:
        return self.db.query(CoachProfile).filter_by(user_id=user_id).first()

    def create_participant_profile(
        self, user_id: int, data: ParticipantProfileCreate
    ) -> ParticipantProfile:
        if self.get_participant_profile(user_id):
            raise ConflictError("Participant profile already exists")

        user = self._get_user(user_id)
        self.reference.get_or_404(Sport, data.main_sport_id, "Sport")
        self.reference.get_or_404(SportGoal, data.sport_goal_id, "Sport goal")

        profile = ParticipantProfile(
            user_id=user.id,
            name=user.full_name or user.username,
            main_sport_id=data.main_sport_id,
            skill_level=data.skill_level,
            sport_goal_id=data.sport_goal_id,
        )
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)

        logger.info(f"Created participant profile {profile.id} for user {user_id}")
        return profile

    def update_participant_profile(
        self, user_id: int, data: ParticipantProfileUpdate
    ) -> ParticipantProfile:
        profile = self.get_participant_profile(user_id)
        if profile is None:
            raise PermissionDeniedError("Participant profile required")

        updates = data.model_dump(exclude_unset=True)
        if updates.get("main_sport_id") is not None:
            self.reference.get_or_404(Sport, updates["main_sport_id"], "Sport")
        if updates.get("sport_goal_id") is not None:
            self.reference.get_or_404(SportGoal, updates["sport_goal_id"], "Sport goal")

        for field, value in updates.items():
            if value is not None:
                setattr(profile, field, value)

        self.db.commit()
        self.db.refresh(profile)
        return profile

    def create_coach_profile(self, user_id: int) -> CoachProfile:
        if self.get_coach_profile(user_id):
            raise ConflictError("Coach profile already exists")

        user = self._get_user(user_id)
        profile = CoachProfile(user_id=user.id, name=user.full_name or user.username)
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)

        logger.info(f"Created coach profile {profile.id} for user {user_id}")
        return profile

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter_by(id=user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user
