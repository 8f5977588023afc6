# backend/modules/reservations/routes/reservation_routes.py

"""
Participant-facing reservation API routes.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.clock import SystemClock, get_clock
from core.database import get_db
from core.response_models import APIResponse, PaginationMeta
from modules.profiles.dependencies import get_current_participant
from modules.profiles.models import ParticipantProfile
from ..models import Reservation, ReservationState
from ..services import ReservationService
from ..schemas.reservation_schemas import (
    MakeReservationRequest,
    ConfirmPaymentRequest,
    CheckInRequest,
    ReservationResponse,
    JoinReservationResponse,
    ReservationWithEventResponse,
    ReservationListFilters,
)

router = APIRouter(prefix="/participant", tags=["Reservations"])


def _join_message(response: JoinReservationResponse) -> str:
    if response.is_waitlisted:
        return "Event is full. You have been added to the waitlist"
    if response.is_checked_in:
        return "Reservation confirmed and checked in"
    if response.payment_required:
        return "Reservation created. Payment is required now as the event starts within 2 days"
    if response.state == ReservationState.JOINED:
        return "Reservation created. Payment is pending"
    return "Reservation created"


def _with_event(reservation: Reservation) -> ReservationWithEventResponse:
    return ReservationWithEventResponse(
        **ReservationResponse.model_validate(reservation).model_dump(),
        event_name=reservation.event.name,
        event_start_time=reservation.event.start_time,
    )


@router.post(
    "/make-reservation",
    response_model=APIResponse[JoinReservationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def make_reservation(
    request: MakeReservationRequest,
    participant: ParticipantProfile = Depends(get_current_participant),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    """
    Join an event.

    - Full events put the participant on the waitlist
    - Free events are paid implicitly; inside the 2-day window they are
      checked in immediately
    - Paid events inside the 2-day window report ``paymentRequired``;
      outside it the reservation simply waits for payment
    """
    service = ReservationService(db, clock)
    result = await service.join_event(participant, request.event_id, request.secret_id)

    response = JoinReservationResponse(
        **ReservationResponse.model_validate(result.reservation).model_dump(),
        within_deadline=result.within_deadline,
        payment_required=result.payment_required,
        waitlist_position=result.waitlist_position,
    )
    return APIResponse(message=_join_message(response), data=response)


@router.post("/confirm-payment", response_model=APIResponse[ReservationResponse])
async def confirm_payment(
    request: ConfirmPaymentRequest,
    participant: ParticipantProfile = Depends(get_current_participant),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    """Confirm payment; checks in automatically inside the deadline window."""
    service = ReservationService(db, clock)
    reservation = await service.confirm_payment(
        participant, request.event_id, auto_check_in=request.auto_check_in
    )
    message = (
        "Payment confirmed and checked in"
        if reservation.is_checked_in
        else "Payment confirmed"
    )
    return APIResponse(message=message, data=ReservationResponse.model_validate(reservation))


@router.post("/check-in", response_model=APIResponse[ReservationResponse])
async def check_in(
    request: CheckInRequest,
    participant: ParticipantProfile = Depends(get_current_participant),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    service = ReservationService(db, clock)
    reservation = await service.check_in(participant, request.event_id)
    return APIResponse(
        message="Checked in successfully",
        data=ReservationResponse.model_validate(reservation),
    )


@router.post(
    "/my-reservations", response_model=APIResponse[List[ReservationWithEventResponse]]
)
async def my_reservations(
    filters: ReservationListFilters,
    participant: ParticipantProfile = Depends(get_current_participant),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    """The caller's reservations, soonest event first."""
    service = ReservationService(db, clock)
    reservations, total = service.get_participant_reservations(participant.id, filters)

    return APIResponse(
        data=[_with_event(r) for r in reservations],
        pagination=PaginationMeta.build(filters.page_number, filters.per_page, total),
    )
