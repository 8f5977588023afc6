# backend/tests/factories/__init__.py

"""
Shared test factories for the SportEvents backend.

Fixtures bind every factory to the per-test session via
``BaseFactory.bind_session``.
"""

from .base import BaseFactory
from .auth import UserFactory, AdminUserFactory
from .reference import (
    SportFactory,
    SportGoalFactory,
    EventStyleFactory,
    FacilityFactory,
    SalonFactory,
)
from .profiles import ParticipantProfileFactory, CoachProfileFactory
from .events import EventFactory, EventInviteFactory
from .reservations import ReservationFactory
from .utils import create_event_scenario

__all__ = [
    # Base
    'BaseFactory',

    # Auth
    'UserFactory',
    'AdminUserFactory',

    # Reference data
    'SportFactory',
    'SportGoalFactory',
    'EventStyleFactory',
    'FacilityFactory',
    'SalonFactory',

    # Profiles
    'ParticipantProfileFactory',
    'CoachProfileFactory',

    # Events
    'EventFactory',
    'EventInviteFactory',

    # Reservations
    'ReservationFactory',

    # Scenarios
    'create_event_scenario',
]
