# backend/modules/reservations/routes/coach_reservation_routes.py

"""
Coach-facing reservation routes: participant lists and approvals.

Available to the event owner, its backup coach and admins.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.auth import CurrentUser, get_current_user
from core.clock import SystemClock, get_clock
from core.database import get_db
from core.response_models import APIResponse, PaginationMeta
from ..models import Reservation
from ..services import ReservationService
from ..schemas.reservation_schemas import (
    ReservationResponse,
    EventParticipantResponse,
    ReservationListFilters,
)

router = APIRouter(prefix="/coach", tags=["Coach Reservations"])


def _participant_entry(reservation: Reservation) -> EventParticipantResponse:
    return EventParticipantResponse(
        **ReservationResponse.model_validate(reservation).model_dump(),
        user_id=reservation.participant.user_id,
        participant_name=reservation.participant.name,
        skill_level=reservation.participant.skill_level,
    )


@router.post(
    "/events/{event_id}/participants",
    response_model=APIResponse[List[EventParticipantResponse]],
)
async def get_event_participants(
    event_id: int,
    filters: ReservationListFilters,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    service = ReservationService(db, clock)
    reservations, total = service.get_event_participants(event_id, current_user, filters)
    return APIResponse(
        data=[_participant_entry(r) for r in reservations],
        pagination=PaginationMeta.build(filters.page_number, filters.per_page, total),
    )


@router.post(
    "/reservations/{reservation_id}/approve",
    response_model=APIResponse[ReservationResponse],
)
async def approve_reservation(
    reservation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    service = ReservationService(db, clock)
    reservation = await service.approve_reservation(reservation_id, current_user)
    return APIResponse(
        message="Reservation approved",
        data=ReservationResponse.model_validate(reservation),
    )
