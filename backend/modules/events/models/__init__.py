from .event_models import Event, EventInvite, EventType, PriceType

__all__ = ["Event", "EventInvite", "EventType", "PriceType"]
