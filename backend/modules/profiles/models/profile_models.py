# backend/modules/profiles/models/profile_models.py

"""
Participant and coach profiles attached one-to-one to user accounts.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Enum, CheckConstraint
from sqlalchemy.orm import relationship, backref
from core.database import Base
from core.mixins import TimestampMixin
import enum


class MembershipLevel(enum.Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"


class ParticipantProfile(Base, TimestampMixin):
    __tablename__ = "participant_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    main_sport_id = Column(Integer, ForeignKey("sports.id"), nullable=False)
    skill_level = Column(Integer, nullable=False)
    sport_goal_id = Column(Integer, ForeignKey("sport_goals.id"), nullable=False)
    membership_level = Column(Enum(MembershipLevel), nullable=True)

    user = relationship(
        "User", backref=backref("participant_profile", uselist=False, cascade="all, delete-orphan")
    )
    main_sport = relationship("Sport")
    sport_goal = relationship("SportGoal")

    __table_args__ = (
        CheckConstraint("skill_level BETWEEN 1 AND 10", name="ck_participant_skill_level"),
    )


class CoachProfile(Base, TimestampMixin):
    __tablename__ = "coach_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    membership_level = Column(Enum(MembershipLevel), nullable=True)

    user = relationship(
        "User", backref=backref("coach_profile", uselist=False, cascade="all, delete-orphan")
    )
