# backend/modules/events/services/event_service.py

"""
Event catalog: create, read, update, delete and search events.
"""

from typing import List, Optional, Tuple, Dict, Any
import secrets
import logging

from fastapi import UploadFile
from sqlalchemy.orm import Session

from core.auth import CurrentUser
from core.clock import SystemClock, get_clock
from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.file_service import FileService
from modules.auth.models import User
from modules.profiles.models import CoachProfile, ParticipantProfile
from modules.reference.models import Sport, EventStyle, Facility, Salon
from modules.reference.services import ReferenceDataService
from ..models import Event, EventInvite, PriceType
from ..schemas.event_schemas import (
    EventCreate,
    EventUpdate,
    EventSearchParams,
    SORTABLE_FIELDS,
    validate_event_rules,
)

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {
    "name", "sport_id", "event_style_id", "level", "event_type",
    "start_time", "end_time", "capacity", "price_type", "is_recurring",
}


def generate_secret_id() -> str:
    """Nine hex characters grouped as xxx-xxx-xxx."""
    raw = secrets.token_hex(6)[:9]
    return "-".join(raw[i:i + 3] for i in range(0, 9, 3))


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EventService:
    """Service for managing events"""

    def __init__(self, db: Session, clock: Optional[SystemClock] = None):
        self.db = db
        self.clock = clock or get_clock()
        self.reference = ReferenceDataService(db)

    def get_event(self, event_id: int) -> Event:
        event = self.db.query(Event).filter_by(id=event_id).first()
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def create_event(self, owner: CoachProfile, data: EventCreate) -> Event:
        if data.start_time <= self.clock.now():
            raise ValidationError("Event start time must be in the future")

        self.reference.get_or_404(Sport, data.sport_id, "Sport")
        style = self.reference.get_or_404(EventStyle, data.event_style_id, "Event style")
        self._validate_venue(data.facility_id, data.salon_id)

        event = Event(
            owner_id=owner.user_id,
            name=data.name,
            description=data.description,
            sport_id=data.sport_id,
            event_style_id=style.id,
            style_name=style.name,
            style_color=style.color,
            level=data.level,
            event_type=data.event_type,
            is_private=data.is_private,
            secret_id=generate_secret_id() if data.is_private else None,
            start_time=data.start_time,
            end_time=data.end_time,
            capacity=data.capacity,
            price_type=data.price_type,
            participation_fee=data.participation_fee,
            is_recurring=data.is_recurring,
            equipment=data.equipment,
            facility_id=data.facility_id,
            salon_id=data.salon_id,
            location=data.location,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        logger.info(f"Coach {owner.user_id} created event {event.id}")
        return event

    async def update_event(
        self, event_id: int, user: CurrentUser, data: EventUpdate
    ) -> Event:
        """
        Apply a partial update.

        Capacity may not drop below the number of confirmed reservations;
        raising it promotes waitlisted reservations into the new slots.
        Moving the start moves every check-in deadline with it, and making
        the event free settles reservations still waiting for payment.
        """
        from modules.reservations.services import ReservationService

        event = self.get_event(event_id)
        if not (user.is_admin or event.owner_id == user.id):
            raise PermissionDeniedError("Only the owner can update this event")

        updates = data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS & updates.keys():
            if updates[field] is None:
                raise ValidationError(f"{field} cannot be empty")

        merged: Dict[str, Any] = {
            field: updates.get(field, getattr(event, field))
            for field in (
                "start_time", "end_time", "price_type", "participation_fee",
                "facility_id", "salon_id", "location",
            )
        }
        if merged["price_type"] == PriceType.FREE:
            merged["participation_fee"] = 0
            updates["participation_fee"] = 0

        try:
            validate_event_rules(**merged)
        except ValueError as e:
            raise ValidationError(str(e))

        if "start_time" in updates and updates["start_time"] <= self.clock.now():
            raise ValidationError("Event start time must be in the future")
        if "sport_id" in updates:
            self.reference.get_or_404(Sport, updates["sport_id"], "Sport")
        if "event_style_id" in updates:
            style = self.reference.get_or_404(EventStyle, updates["event_style_id"], "Event style")
            updates["style_name"] = style.name
            updates["style_color"] = style.color
        if {"facility_id", "salon_id"} & updates.keys():
            self._validate_venue(merged["facility_id"], merged["salon_id"])

        reservation_service = ReservationService(self.db, self.clock)
        previous_capacity = event.capacity
        if "capacity" in updates:
            confirmed = reservation_service.count_confirmed(event.id)
            if updates["capacity"] < confirmed:
                raise ValidationError(
                    f"Capacity cannot be lower than confirmed reservations ({confirmed})"
                )

        became_free = (
            updates.get("price_type") == PriceType.FREE and event.price_type != PriceType.FREE
        )

        for field, value in updates.items():
            setattr(event, field, value)
        if "start_time" in updates:
            reservation_service.reschedule_deadlines(event.id, event.start_time)

        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Event {event.id} updated by user {user.id}: {sorted(updates)}")

        if became_free:
            await reservation_service.settle_free_event(event, user_id=user.id)
            self.db.refresh(event)
        if event.capacity > previous_capacity:
            await reservation_service.promote_waitlisted(event, user_id=user.id)
            self.db.refresh(event)

        return event

    async def upload_photo(
        self, event_id: int, user: CurrentUser, file: UploadFile, file_service: FileService
    ) -> Event:
        """Store a new event photo, replacing the previous one."""
        event = self.get_event(event_id)
        if not (user.is_admin or event.owner_id == user.id):
            raise PermissionDeniedError("Only the owner can update this event")

        stored = await file_service.upload_file(file, folder="events")
        previous = event.photo_url
        event.photo_url = stored["file_url"]
        self.db.commit()
        self.db.refresh(event)

        if previous:
            file_service.delete_file(previous)
        logger.info(f"Event {event.id} photo set to {event.photo_url}")
        return event

    def delete_event(self, event_id: int, user: CurrentUser):
        event = self.get_event(event_id)
        if not (user.is_admin or event.owner_id == user.id):
            raise PermissionDeniedError("Only the owner can delete this event")

        self.db.delete(event)
        self.db.commit()
        logger.info(f"Event {event_id} deleted by user {user.id}")

    def join_as_backup_coach(self, event_id: int, coach: CoachProfile) -> Event:
        event = self.get_event(event_id)
        if event.owner_id == coach.user_id:
            raise PermissionDeniedError("The owner cannot be the backup coach")
        if event.backup_coach_id is not None:
            raise ConflictError("This event already has a backup coach")

        event.backup_coach_id = coach.user_id
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Coach {coach.user_id} is backup coach for event {event.id}")
        return event

    def invite_user(self, event_id: int, inviter: CurrentUser, invitee_id: int) -> EventInvite:
        event = self.get_event(event_id)
        if not (inviter.is_admin or event.is_managed_by(inviter.id)):
            raise PermissionDeniedError("You are not the owner or backup coach")

        if self.db.query(User).filter_by(id=invitee_id).first() is None:
            raise NotFoundError("User not found")

        if self.db.query(EventInvite).filter_by(event_id=event.id, invitee_id=invitee_id).first():
            raise ConflictError("You already invited this user")

        invite = EventInvite(event_id=event.id, invitee_id=invitee_id, inviter_id=inviter.id)
        self.db.add(invite)
        self.db.commit()
        self.db.refresh(invite)
        return invite

    def get_event_detail(self, event_id: int, user: CurrentUser) -> Dict[str, Any]:
        """
        Event with the caller's reservation and capacity figures.

        Private events are visible to their managers, to admins, to invited
        users and to participants holding a reservation. Only managers and
        admins get the secret id back.
        """
        from modules.reservations.services import ReservationService

        event = self.get_event(event_id)
        reservation_service = ReservationService(self.db, self.clock)

        reservation = None
        participant = self.db.query(ParticipantProfile).filter_by(user_id=user.id).first()
        if participant is not None:
            reservation = reservation_service.get_reservation(participant.id, event.id)

        can_reserve = reservation is None and event.start_time > self.clock.now()
        is_manager = user.is_admin or event.is_managed_by(user.id)
        if event.is_private and not is_manager:
            reserved = reservation is not None
            invited = (
                self.db.query(EventInvite)
                .filter_by(event_id=event.id, invitee_id=user.id)
                .first()
                is not None
            )
            if not (reserved or invited):
                raise PermissionDeniedError("Access denied to this private event")

        confirmed = reservation_service.count_confirmed(event.id)
        return {
            "event": event,
            "reservation": reservation,
            "confirmed_count": confirmed,
            "available_spots": max(event.capacity - confirmed, 0),
            "can_reserve": can_reserve,
            "secret_id": event.secret_id if is_manager else None,
        }

    def search_events(self, params: EventSearchParams) -> Tuple[List[Event], int]:
        """Public events matching the filters, paginated."""
        query = self.db.query(Event).filter(Event.is_private.is_(False))

        if params.search:
            pattern = f"%{_escape_like(params.search.strip())}%"
            query = query.filter(Event.name.ilike(pattern, escape="\\"))

        exact_filters = {
            "sport_id": params.sport_id,
            "event_style_id": params.event_style_id,
            "event_type": params.event_type,
            "price_type": params.price_type,
            "facility_id": params.facility_id,
            "salon_id": params.salon_id,
            "owner_id": params.owner_id,
            "level": params.level,
        }
        for field, value in exact_filters.items():
            if value is not None:
                query = query.filter(getattr(Event, field) == value)

        if params.upcoming_only:
            query = query.filter(Event.start_time > self.clock.now())

        total = query.count()

        column = getattr(Event, SORTABLE_FIELDS[params.sort_by])
        order = column.desc() if params.sort_type == "desc" else column.asc()
        events = (
            query.order_by(order, Event.id.asc())
            .offset(params.skip)
            .limit(params.per_page)
            .all()
        )
        return events, total

    def _validate_venue(self, facility_id: Optional[int], salon_id: Optional[int]):
        if facility_id is not None:
            self.reference.get_or_404(Facility, facility_id, "Facility")
        if salon_id is not None:
            salon = self.reference.get_or_404(Salon, salon_id, "Salon")
            if salon.facility_id != facility_id:
                raise ValidationError("Salon does not belong to the facility")
