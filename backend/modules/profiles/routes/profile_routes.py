from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.auth import CurrentUser, get_current_user
from core.database import get_db
from core.response_models import APIResponse
from ..dependencies import get_current_participant
from ..models import ParticipantProfile
from ..schemas.profile_schemas import (
    ParticipantProfileCreate,
    ParticipantProfileUpdate,
    ParticipantProfileResponse,
    CoachProfileResponse,
)
from ..services.profile_service import ProfileService

participant_router = APIRouter(prefix="/participant", tags=["Participant"])
coach_router = APIRouter(prefix="/coach", tags=["Coach"])


@participant_router.post(
    "/create-profile",
    response_model=APIResponse[ParticipantProfileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_participant_profile(
    profile_data: ParticipantProfileCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the caller's participant profile. Required before joining events."""
    profile = ProfileService(db).create_participant_profile(current_user.id, profile_data)
    return APIResponse(
        message="Profile created",
        data=ParticipantProfileResponse.model_validate(profile),
    )


@participant_router.post(
    "/edit-profile", response_model=APIResponse[ParticipantProfileResponse]
)
async def edit_participant_profile(
    profile_data: ParticipantProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = ProfileService(db).update_participant_profile(current_user.id, profile_data)
    return APIResponse(
        message="Profile updated",
        data=ParticipantProfileResponse.model_validate(profile),
    )


@participant_router.get("/profile", response_model=APIResponse[ParticipantProfileResponse])
async def get_participant_profile(
    participant: ParticipantProfile = Depends(get_current_participant),
):
    return APIResponse(data=ParticipantProfileResponse.model_validate(participant))


@coach_router.post(
    "/create-profile",
    response_model=APIResponse[CoachProfileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_coach_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = ProfileService(db).create_coach_profile(current_user.id)
    return APIResponse(
        message="Coach profile created",
        data=CoachProfileResponse.model_validate(profile),
    )
