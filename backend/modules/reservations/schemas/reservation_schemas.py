# backend/modules/reservations/schemas/reservation_schemas.py

"""
Pydantic schemas for event reservations.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional

from core.schemas import CamelModel
from ..models import ReservationState


class MakeReservationRequest(CamelModel):
    event_id: int = Field(..., gt=0)
    secret_id: Optional[str] = Field(None, max_length=11)


class ConfirmPaymentRequest(CamelModel):
    event_id: int = Field(..., gt=0)
    auto_check_in: bool = False


class CheckInRequest(CamelModel):
    event_id: int = Field(..., gt=0)


class ReservationFlags(CamelModel):
    """The boolean view of a reservation state the web client works with"""

    is_joined: bool = True
    is_waitlisted: bool = Field(False, alias="isWaitListed")
    is_paid: bool = False
    is_checked_in: bool = False
    is_approved: bool = False


class ReservationResponse(ReservationFlags):
    id: int
    event_id: int
    participant_id: int
    state: ReservationState
    check_in_deadline: datetime
    paid_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class JoinReservationResponse(ReservationResponse):
    within_deadline: bool
    payment_required: bool
    waitlist_position: Optional[int] = None


class ReservationWithEventResponse(ReservationResponse):
    event_name: str
    event_start_time: datetime


class EventParticipantResponse(ReservationResponse):
    user_id: int
    participant_name: str
    skill_level: int


class ReservationListFilters(CamelModel):
    per_page: int = Field(10, ge=1, le=100)
    page_number: int = Field(1, ge=1)
    is_waitlisted: Optional[bool] = Field(None, alias="isWaitListed")
    is_paid: Optional[bool] = None
    is_checked_in: Optional[bool] = None
    is_approved: Optional[bool] = None
    upcoming_only: bool = False

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.per_page
