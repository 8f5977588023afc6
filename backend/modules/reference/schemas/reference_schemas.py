from typing import Optional
from core.schemas import CamelModel


class SportResponse(CamelModel):
    id: int
    name: str
    group_name: str


class SportGoalResponse(CamelModel):
    id: int
    name: str


class EventStyleResponse(CamelModel):
    id: int
    name: str
    color: str


class SalonResponse(CamelModel):
    id: int
    facility_id: int
    sport_id: int
    name: str
    price_info: str
    description: Optional[str] = None


class FacilityResponse(CamelModel):
    id: int
    name: str
    address: str
    phone: str
    email: Optional[str] = None
