# backend/tests/factories/utils.py

from typing import Dict, List

from modules.reservations.models import ReservationState
from .events import EventFactory
from .profiles import CoachProfileFactory
from .reservations import ReservationFactory


def create_event_scenario(
    capacity: int = 2,
    confirmed: int = 0,
    waitlisted: int = 0,
    **event_kwargs,
) -> Dict:
    """
    Create a coach-owned event with existing reservations.

    Args:
        capacity: Event capacity
        confirmed: Number of JOINED reservations to create
        waitlisted: Number of WAITLISTED reservations to create
        event_kwargs: Extra EventFactory attributes or traits

    Returns:
        Dict with the coach, the event and the created reservations
    """
    coach = CoachProfileFactory()
    event = EventFactory(owner=coach.user, capacity=capacity, **event_kwargs)

    joined: List = [
        ReservationFactory(event=event, state=ReservationState.JOINED)
        for _ in range(confirmed)
    ]
    waiting: List = [
        ReservationFactory(event=event, state=ReservationState.WAITLISTED)
        for _ in range(waitlisted)
    ]

    return {
        "coach": coach,
        "event": event,
        "confirmed": joined,
        "waitlisted": waiting,
    }
