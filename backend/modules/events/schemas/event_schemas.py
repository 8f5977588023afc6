# backend/modules/events/schemas/event_schemas.py

"""
Pydantic schemas for the event catalog.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Literal

from pydantic import Field, field_validator, model_validator

from core.clock import to_naive_utc
from core.schemas import CamelModel
from ..models import EventType, PriceType

SORTABLE_FIELDS = {
    "startTime": "start_time",
    "createdAt": "created_at",
    "name": "name",
    "level": "level",
    "capacity": "capacity",
    "participationFee": "participation_fee",
}


class EventFields(CamelModel):
    """Fields shared by create and update payloads"""

    @field_validator("start_time", "end_time", mode="after", check_fields=False)
    @classmethod
    def normalize_datetime(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None

    @field_validator("location", "equipment", "description", mode="after", check_fields=False)
    @classmethod
    def strip_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class EventCreate(EventFields):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    sport_id: int = Field(..., alias="sport")
    event_style_id: int = Field(..., alias="eventStyle")
    level: int = Field(..., ge=1, le=10)
    event_type: EventType = Field(..., alias="type")
    is_private: bool = Field(False, alias="private")
    start_time: datetime
    end_time: datetime
    capacity: int = Field(..., ge=1)
    price_type: PriceType
    participation_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_recurring: bool = False
    equipment: Optional[str] = Field(None, max_length=500)
    facility_id: Optional[int] = Field(None, alias="facility")
    salon_id: Optional[int] = Field(None, alias="salon")
    location: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def validate_event(self):
        validate_event_rules(
            start_time=self.start_time,
            end_time=self.end_time,
            price_type=self.price_type,
            participation_fee=self.participation_fee,
            facility_id=self.facility_id,
            salon_id=self.salon_id,
            location=self.location,
        )
        if self.price_type == PriceType.FREE:
            self.participation_fee = Decimal("0")
        return self


class EventUpdate(EventFields):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    sport_id: Optional[int] = Field(None, alias="sport")
    event_style_id: Optional[int] = Field(None, alias="eventStyle")
    level: Optional[int] = Field(None, ge=1, le=10)
    event_type: Optional[EventType] = Field(None, alias="type")
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=1)
    price_type: Optional[PriceType] = None
    participation_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_recurring: Optional[bool] = None
    equipment: Optional[str] = Field(None, max_length=500)
    facility_id: Optional[int] = Field(None, alias="facility")
    salon_id: Optional[int] = Field(None, alias="salon")
    location: Optional[str] = Field(None, max_length=500)


def validate_event_rules(
    start_time: datetime,
    end_time: datetime,
    price_type: PriceType,
    participation_fee: Optional[Decimal],
    facility_id: Optional[int],
    salon_id: Optional[int],
    location: Optional[str],
):
    """Cross-field rules, checked on create and on the merged result of an update."""
    if end_time <= start_time:
        raise ValueError("End time must be after start time")

    if price_type != PriceType.FREE and participation_fee is None:
        raise ValueError("Participation fee is required for paid events")

    if salon_id is not None and facility_id is None:
        raise ValueError("A salon requires its facility")

    has_facility = facility_id is not None
    has_location = bool(location)
    if has_facility == has_location:
        raise ValueError("Provide either a facility or a location, not both")


class EventResponse(CamelModel):
    id: int
    owner_id: int
    backup_coach_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    sport_id: int
    event_style_id: int
    style_name: str
    style_color: str
    level: int
    event_type: EventType
    is_private: bool
    start_time: datetime
    end_time: datetime
    capacity: int
    price_type: PriceType
    participation_fee: Decimal
    is_recurring: bool
    equipment: Optional[str] = None
    facility_id: Optional[int] = None
    salon_id: Optional[int] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    photo_url: Optional[str] = None


class ManagedEventResponse(EventResponse):
    """Event as seen by its owner, backup coach or an admin"""

    secret_id: Optional[str] = None


class EventReservationStatus(CamelModel):
    id: int
    is_approved: bool
    is_waitlisted: bool = Field(alias="isWaitListed")
    is_paid: bool
    is_checked_in: bool


class EventDetailResponse(EventResponse):
    secret_id: Optional[str] = None  # managers only
    confirmed_count: int
    available_spots: int
    can_reserve: bool
    reservation: Optional[EventReservationStatus] = None


class EventSearchParams(CamelModel):
    per_page: int = Field(10, ge=1, le=100)
    page_number: int = Field(1, ge=1)
    search: Optional[str] = Field(None, max_length=100)
    sport_id: Optional[int] = Field(None, alias="sport")
    event_style_id: Optional[int] = Field(None, alias="eventStyle")
    event_type: Optional[EventType] = Field(None, alias="type")
    price_type: Optional[PriceType] = None
    facility_id: Optional[int] = Field(None, alias="facility")
    salon_id: Optional[int] = Field(None, alias="salon")
    owner_id: Optional[int] = Field(None, alias="owner")
    level: Optional[int] = Field(None, ge=1, le=10)
    upcoming_only: bool = False
    sort_by: str = "startTime"
    sort_type: Literal["asc", "desc"] = "asc"

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, value: str) -> str:
        if value not in SORTABLE_FIELDS:
            raise ValueError(f"sortBy must be one of: {', '.join(SORTABLE_FIELDS)}")
        return value

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.per_page


class InviteRequest(CamelModel):
    user_id: int = Field(..., gt=0)
