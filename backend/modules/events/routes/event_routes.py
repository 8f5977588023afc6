# backend/modules/events/routes/event_routes.py

"""
Event catalog API routes.

Coaches manage their events under ``/coach/events``; everyone browses the
public catalog through ``/get-event``.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from core.auth import CurrentUser, get_current_user
from core.clock import SystemClock, get_clock
from core.database import get_db
from core.exceptions import NotFoundError
from core.file_service import FileService, get_file_service
from core.response_models import APIResponse, PaginationMeta
from modules.profiles.dependencies import get_current_coach
from modules.profiles.models import CoachProfile
from ..services import EventService
from ..schemas.event_schemas import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetailResponse,
    EventReservationStatus,
    EventSearchParams,
    InviteRequest,
    ManagedEventResponse,
)

coach_router = APIRouter(prefix="/coach/events", tags=["Coach Events"])
catalog_router = APIRouter(prefix="/get-event", tags=["Events"])


@coach_router.post(
    "", response_model=APIResponse[ManagedEventResponse], status_code=status.HTTP_201_CREATED
)
async def create_event(
    event_data: EventCreate,
    coach: CoachProfile = Depends(get_current_coach),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    """
    Publish a new event.

    - Sport, style, facility and salon must exist
    - Private events receive a secret id, returned only to the event's managers
    - Free events always have a participation fee of 0
    """
    event = EventService(db, clock).create_event(coach, event_data)
    return APIResponse(
        message="Event created successfully",
        data=ManagedEventResponse.model_validate(event),
    )


@coach_router.put("/{event_id}", response_model=APIResponse[ManagedEventResponse])
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    event = await EventService(db, clock).update_event(event_id, current_user, event_data)
    return APIResponse(
        message="Event updated successfully",
        data=ManagedEventResponse.model_validate(event),
    )


@coach_router.post("/{event_id}/photo", response_model=APIResponse[ManagedEventResponse])
async def upload_event_photo(
    event_id: int,
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload the event photo as multipart form data.

    Accepts jpg, jpeg, png, gif and webp images up to the configured size
    limit. The stored image is served back from ``photoUrl``.
    """
    event = await EventService(db).upload_photo(event_id, current_user, file, file_service)
    return APIResponse(
        message="Event photo uploaded successfully",
        data=ManagedEventResponse.model_validate(event),
    )


@coach_router.delete("/{event_id}", response_model=APIResponse[None])
async def delete_event(
    event_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    EventService(db).delete_event(event_id, current_user)
    return APIResponse(message="Event deleted successfully")


@coach_router.post("/{event_id}/backup-coach", response_model=APIResponse[ManagedEventResponse])
async def join_backup_coach(
    event_id: int,
    coach: CoachProfile = Depends(get_current_coach),
    db: Session = Depends(get_db),
):
    event = EventService(db).join_as_backup_coach(event_id, coach)
    return APIResponse(
        message="Joined as backup coach", data=ManagedEventResponse.model_validate(event)
    )


@coach_router.post(
    "/{event_id}/invite",
    response_model=APIResponse[None],
    status_code=status.HTTP_201_CREATED,
)
async def invite_to_event(
    event_id: int,
    invite: InviteRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    EventService(db).invite_user(event_id, current_user, invite.user_id)
    return APIResponse(message="Invited to event successfully")


@catalog_router.post("", response_model=APIResponse[List[EventResponse]])
async def search_events(
    params: EventSearchParams,
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    """Paginated search over public events."""
    events, total = EventService(db, clock).search_events(params)
    if not events:
        raise NotFoundError("No results found")

    return APIResponse(
        data=[EventResponse.model_validate(e) for e in events],
        pagination=PaginationMeta.build(params.page_number, params.per_page, total),
    )


@catalog_router.get("/{event_id}", response_model=APIResponse[EventDetailResponse])
async def get_event(
    event_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock),
):
    detail = EventService(db, clock).get_event_detail(event_id, current_user)
    reservation = detail["reservation"]

    return APIResponse(
        data=EventDetailResponse(
            **EventResponse.model_validate(detail["event"]).model_dump(),
            confirmed_count=detail["confirmed_count"],
            available_spots=detail["available_spots"],
            can_reserve=detail["can_reserve"],
            secret_id=detail["secret_id"],
            reservation=(
                EventReservationStatus.model_validate(reservation)
                if reservation is not None
                else None
            ),
        )
    )
