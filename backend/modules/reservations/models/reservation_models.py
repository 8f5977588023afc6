# backend/modules/reservations/models/reservation_models.py

"""
Event reservations modelled as an explicit state machine.

A reservation is in exactly one of four states. The legacy boolean flags
(``is_waitlisted``, ``is_paid``, ``is_checked_in``) are derived from the
state so they can never contradict each other.

    (new)      -> WAITLISTED | JOINED | PAID
    WAITLISTED -> JOINED | PAID        (promotion when capacity frees up)
    JOINED     -> PAID                 (payment confirmed)
    PAID       -> CHECKED_IN
    CHECKED_IN -> (terminal)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column, Integer, DateTime, ForeignKey, Enum, Boolean, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from core.database import Base
from core.exceptions import InvalidTransitionError
from core.mixins import TimestampMixin
import enum


class ReservationState(enum.Enum):
    JOINED = "joined"
    WAITLISTED = "waitlisted"
    PAID = "paid"
    CHECKED_IN = "checked_in"


INITIAL_STATES = frozenset(
    {ReservationState.WAITLISTED, ReservationState.JOINED, ReservationState.PAID}
)

ALLOWED_TRANSITIONS = {
    ReservationState.WAITLISTED: frozenset({ReservationState.JOINED, ReservationState.PAID}),
    ReservationState.JOINED: frozenset({ReservationState.PAID}),
    ReservationState.PAID: frozenset({ReservationState.CHECKED_IN}),
    ReservationState.CHECKED_IN: frozenset(),
}

# States that occupy a slot in the event's capacity
CONFIRMED_STATES = (
    ReservationState.JOINED,
    ReservationState.PAID,
    ReservationState.CHECKED_IN,
)


def can_transition(current: Optional[ReservationState], target: ReservationState) -> bool:
    if current is None:
        return target in INITIAL_STATES
    return target in ALLOWED_TRANSITIONS[current]


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(
        Integer, ForeignKey("participant_profiles.id", ondelete="CASCADE"), nullable=False
    )
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)

    state = Column(Enum(ReservationState), nullable=False, index=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    check_in_deadline = Column(DateTime, nullable=False)

    paid_at = Column(DateTime)
    checked_in_at = Column(DateTime)
    promoted_at = Column(DateTime)
    approved_at = Column(DateTime)

    participant = relationship("ParticipantProfile")
    event = relationship("Event", back_populates="reservations")

    __table_args__ = (
        UniqueConstraint("participant_id", "event_id", name="uq_reservation_participant_event"),
        Index("idx_reservation_event_state", "event_id", "state"),
    )

    @property
    def is_joined(self) -> bool:
        return True

    @property
    def is_waitlisted(self) -> bool:
        return self.state == ReservationState.WAITLISTED

    @property
    def is_paid(self) -> bool:
        return self.state in (ReservationState.PAID, ReservationState.CHECKED_IN)

    @property
    def is_checked_in(self) -> bool:
        return self.state == ReservationState.CHECKED_IN

    def transition_to(self, target: ReservationState, at: datetime) -> ReservationState:
        """Move to ``target`` or raise ``InvalidTransitionError``. Returns the previous state."""
        previous = self.state
        if not can_transition(previous, target):
            raise InvalidTransitionError(
                previous.value if previous else "new", target.value
            )

        self.state = target
        if target == ReservationState.PAID:
            self.paid_at = at
        elif target == ReservationState.CHECKED_IN:
            self.checked_in_at = at
        if previous == ReservationState.WAITLISTED:
            self.promoted_at = at
        return previous

    def __repr__(self):
        return f"<Reservation {self.id} - participant {self.participant_id} event {self.event_id} {self.state}>"
