# backend/tests/factories/events.py

from datetime import timedelta
from decimal import Decimal

import factory
from factory import Sequence, SubFactory, LazyAttribute, LazyFunction
from .base import BaseFactory
from .auth import UserFactory
from .reference import SportFactory, EventStyleFactory
from core.clock import utcnow
from modules.events.models import Event, EventInvite, EventType, PriceType
from modules.events.services.event_service import generate_secret_id


class EventFactory(BaseFactory):
    """Public paid event a week from now, held at a free-text location."""

    class Meta:
        model = Event

    owner = SubFactory(UserFactory)
    name = Sequence(lambda n: f"Training Session {n}")
    description = "Weekly group training"
    sport = SubFactory(SportFactory)
    level = 5
    event_type = EventType.OUTDOOR
    event_style = SubFactory(EventStyleFactory)
    style_name = LazyAttribute(lambda obj: obj.event_style.name)
    style_color = LazyAttribute(lambda obj: obj.event_style.color)
    is_private = False
    secret_id = None
    start_time = LazyFunction(lambda: utcnow() + timedelta(days=7))
    end_time = LazyAttribute(lambda obj: obj.start_time + timedelta(hours=2))
    capacity = 10
    price_type = PriceType.STABLE
    participation_fee = Decimal("25.00")
    is_recurring = False
    location = "Central Park"

    class Params:
        free = factory.Trait(
            price_type=PriceType.FREE,
            participation_fee=Decimal("0"),
        )
        private = factory.Trait(
            is_private=True,
            secret_id=LazyFunction(generate_secret_id),
        )


class EventInviteFactory(BaseFactory):
    class Meta:
        model = EventInvite

    event = SubFactory(EventFactory)
    invitee = SubFactory(UserFactory)
    inviter_id = LazyAttribute(lambda obj: obj.event.owner_id)
