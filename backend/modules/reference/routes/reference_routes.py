from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.response_models import APIResponse
from ..schemas.reference_schemas import (
    SportResponse,
    SportGoalResponse,
    EventStyleResponse,
    FacilityResponse,
    SalonResponse,
)
from ..services.reference_service import ReferenceDataService

router = APIRouter(prefix="/reference", tags=["Reference Data"])


@router.get("/sports", response_model=APIResponse[List[SportResponse]])
async def list_sports(db: Session = Depends(get_db)):
    sports = ReferenceDataService(db).list_sports()
    return APIResponse(data=[SportResponse.model_validate(s) for s in sports])


@router.get("/sport-goals", response_model=APIResponse[List[SportGoalResponse]])
async def list_sport_goals(db: Session = Depends(get_db)):
    goals = ReferenceDataService(db).list_sport_goals()
    return APIResponse(data=[SportGoalResponse.model_validate(g) for g in goals])


@router.get("/event-styles", response_model=APIResponse[List[EventStyleResponse]])
async def list_event_styles(db: Session = Depends(get_db)):
    styles = ReferenceDataService(db).list_event_styles()
    return APIResponse(data=[EventStyleResponse.model_validate(s) for s in styles])


@router.get("/facilities", response_model=APIResponse[List[FacilityResponse]])
async def list_facilities(db: Session = Depends(get_db)):
    facilities = ReferenceDataService(db).list_facilities()
    return APIResponse(data=[FacilityResponse.model_validate(f) for f in facilities])


@router.get(
    "/facilities/{facility_id}/salons", response_model=APIResponse[List[SalonResponse]]
)
async def list_salons(facility_id: int, db: Session = Depends(get_db)):
    """Salons belonging to a facility."""
    salons = ReferenceDataService(db).list_salons(facility_id)
    return APIResponse(data=[SalonResponse.model_validate(s) for s in salons])
