# backend/modules/profiles/tests/test_profile_api.py

"""
Tests for participant and coach profile endpoints.
"""

import pytest
from fastapi import status

from tests.factories import (
    CoachProfileFactory,
    ParticipantProfileFactory,
    SportFactory,
    SportGoalFactory,
    UserFactory,
)

BASE = "/api/v1"


@pytest.fixture
def user(db_session):
    return UserFactory(first_name="Ada", last_name="Lovelace")


class TestParticipantProfileAPI:
    def test_create_profile(self, client, user, auth_headers):
        sport = SportFactory()
        goal = SportGoalFactory()

        response = client.post(
            f"{BASE}/participant/create-profile",
            json={"mainSport": sport.id, "skillLevel": 6, "sportGoal": goal.id},
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["userId"] == user.id
        assert data["name"] == "Ada Lovelace"
        assert data["skillLevel"] == 6
        assert data["mainSportId"] == sport.id

    def test_create_profile_twice(self, client, auth_headers):
        profile = ParticipantProfileFactory()

        response = client.post(
            f"{BASE}/participant/create-profile",
            json={"mainSport": profile.main_sport_id, "skillLevel": 2, "sportGoal": profile.sport_goal_id},
            headers=auth_headers(profile.user),
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_create_profile_unknown_sport(self, client, user, auth_headers):
        response = client.post(
            f"{BASE}/participant/create-profile",
            json={"mainSport": 9999, "skillLevel": 6, "sportGoal": SportGoalFactory().id},
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Sport not found"

    @pytest.mark.parametrize("skill_level", [0, 11])
    def test_skill_level_bounds(self, client, user, auth_headers, skill_level):
        response = client.post(
            f"{BASE}/participant/create-profile",
            json={
                "mainSport": SportFactory().id,
                "skillLevel": skill_level,
                "sportGoal": SportGoalFactory().id,
            },
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_edit_profile(self, client, auth_headers):
        profile = ParticipantProfileFactory(skill_level=3)

        response = client.post(
            f"{BASE}/participant/edit-profile",
            json={"skillLevel": 9},
            headers=auth_headers(profile.user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["skillLevel"] == 9

    def test_edit_profile_empty_payload(self, client, auth_headers):
        profile = ParticipantProfileFactory()

        response = client.post(
            f"{BASE}/participant/edit-profile", json={}, headers=auth_headers(profile.user)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Nothing to update" in response.json()["error"]

    def test_edit_without_profile(self, client, user, auth_headers):
        response = client.post(
            f"{BASE}/participant/edit-profile",
            json={"skillLevel": 4},
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_get_profile(self, client, auth_headers):
        profile = ParticipantProfileFactory()

        response = client.get(f"{BASE}/participant/profile", headers=auth_headers(profile.user))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["id"] == profile.id


class TestCoachProfileAPI:
    def test_create_coach_profile(self, client, user, auth_headers):
        response = client.post(f"{BASE}/coach/create-profile", headers=auth_headers(user))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["userId"] == user.id
        assert data["isVerified"] is False

    def test_create_coach_profile_twice(self, client, auth_headers):
        coach = CoachProfileFactory()

        response = client.post(f"{BASE}/coach/create-profile", headers=auth_headers(coach.user))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "Coach profile already exists"
