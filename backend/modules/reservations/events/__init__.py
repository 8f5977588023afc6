"""
Reservation lifecycle events.
"""

from .reservation_events import (
    ReservationEvent,
    ReservationJoinedEvent,
    ReservationWaitlistedEvent,
    PaymentConfirmedEvent,
    CheckedInEvent,
    ReservationApprovedEvent,
    ReservationPromotedEvent,
    emit_reservation_event,
    register_event_handler,
    unregister_event_handler,
    register_default_handlers,
    reservation_event_handlers,
)

__all__ = [
    "ReservationEvent",
    "ReservationJoinedEvent",
    "ReservationWaitlistedEvent",
    "PaymentConfirmedEvent",
    "CheckedInEvent",
    "ReservationApprovedEvent",
    "ReservationPromotedEvent",
    "emit_reservation_event",
    "register_event_handler",
    "unregister_event_handler",
    "register_default_handlers",
    "reservation_event_handlers",
]
