# backend/modules/events/models/event_models.py

"""
Sporting events published by coaches, and invitations to private events.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, Enum, Boolean,
    Numeric, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin
import enum


class EventType(enum.Enum):
    INDOOR = "Indoor"
    OUTDOOR = "Outdoor"
    ONLINE = "Online"


class PriceType(enum.Enum):
    FREE = "Free"
    MANUAL = "Manual"
    STABLE = "Stable"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    backup_coach_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    name = Column(String(200), nullable=False)
    description = Column(Text)
    sport_id = Column(Integer, ForeignKey("sports.id"), nullable=False)
    level = Column(Integer, nullable=False)
    event_type = Column(Enum(EventType), nullable=False)

    # Style reference plus a snapshot taken at creation time
    event_style_id = Column(Integer, ForeignKey("event_styles.id"), nullable=False)
    style_name = Column(String(100), nullable=False)
    style_color = Column(String(7), nullable=False)

    is_private = Column(Boolean, default=False, nullable=False)
    secret_id = Column(String(11), unique=True, nullable=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    capacity = Column(Integer, nullable=False)

    price_type = Column(Enum(PriceType), nullable=False)
    participation_fee = Column(Numeric(10, 2), default=0, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    equipment = Column(String(500))

    # Exactly one of facility (optionally with salon) or free-text location
    facility_id = Column(Integer, ForeignKey("facilities.id"), nullable=True)
    salon_id = Column(Integer, ForeignKey("salons.id"), nullable=True)
    location = Column(String(500), nullable=True)
    photo_url = Column(String(500), nullable=True)

    owner = relationship("User", foreign_keys=[owner_id])
    backup_coach = relationship("User", foreign_keys=[backup_coach_id])
    sport = relationship("Sport")
    event_style = relationship("EventStyle")
    facility = relationship("Facility")
    salon = relationship("Salon")
    reservations = relationship(
        "Reservation", back_populates="event", cascade="all, delete-orphan"
    )
    invites = relationship(
        "EventInvite", back_populates="event", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_event_capacity"),
        CheckConstraint("level BETWEEN 1 AND 10", name="ck_event_level"),
        CheckConstraint("end_time > start_time", name="ck_event_time_order"),
        Index("idx_event_private_start", "is_private", "start_time"),
    )

    @property
    def is_free(self) -> bool:
        return self.price_type == PriceType.FREE

    def is_managed_by(self, user_id: int) -> bool:
        return user_id in (self.owner_id, self.backup_coach_id)

    def __repr__(self):
        return f"<Event {self.id} - {self.name} at {self.start_time}>"


class EventInvite(Base, TimestampMixin):
    __tablename__ = "event_invites"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    invitee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    inviter_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    event = relationship("Event", back_populates="invites")
    invitee = relationship("User", foreign_keys=[invitee_id])

    __table_args__ = (
        UniqueConstraint("event_id", "invitee_id", name="uq_event_invite"),
    )
