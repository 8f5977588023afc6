from typing import Optional
from pydantic import Field, model_validator

from core.schemas import CamelModel
from ..models import MembershipLevel


class ParticipantProfileCreate(CamelModel):
    main_sport_id: int = Field(..., alias="mainSport")
    skill_level: int = Field(..., ge=1, le=10)
    sport_goal_id: int = Field(..., alias="sportGoal")


class ParticipantProfileUpdate(CamelModel):
    main_sport_id: Optional[int] = Field(None, alias="mainSport")
    skill_level: Optional[int] = Field(None, ge=1, le=10)
    sport_goal_id: Optional[int] = Field(None, alias="sportGoal")

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("Nothing to update")
        return self


class ParticipantProfileResponse(CamelModel):
    id: int
    user_id: int
    name: str
    main_sport_id: int
    skill_level: int
    sport_goal_id: int
    membership_level: Optional[MembershipLevel] = None


class CoachProfileResponse(CamelModel):
    id: int
    user_id: int
    name: str
    is_verified: bool
