# backend/modules/reservations/events/reservation_events.py

"""
Event system for reservation lifecycle hooks.
"""

from typing import Dict, Any, List, Callable, Optional
from datetime import datetime
from dataclasses import dataclass, field
import asyncio
import logging

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ReservationEvent:
    """Base reservation event"""

    event_type: str
    reservation_id: int
    participant_id: int
    event_id: int
    timestamp: datetime
    user_id: Optional[int] = None  # Who triggered the event
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_type": self.event_type,
            "reservation_id": self.reservation_id,
            "participant_id": self.participant_id,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "metadata": self.metadata,
        }


@dataclass(kw_only=True)
class ReservationJoinedEvent(ReservationEvent):
    """Emitted when a participant takes a slot"""

    event_type: str = "reservation.joined"
    state: str = None
    within_deadline: bool = False


@dataclass(kw_only=True)
class ReservationWaitlistedEvent(ReservationEvent):
    """Emitted when a join lands on the waitlist"""

    event_type: str = "reservation.waitlisted"
    position: int = None


@dataclass(kw_only=True)
class PaymentConfirmedEvent(ReservationEvent):
    """Emitted when payment is confirmed"""

    event_type: str = "reservation.paid"
    auto_checked_in: bool = False


@dataclass(kw_only=True)
class CheckedInEvent(ReservationEvent):
    """Emitted when a participant checks in"""

    event_type: str = "reservation.checked_in"


@dataclass(kw_only=True)
class ReservationApprovedEvent(ReservationEvent):
    """Emitted when a coach approves a reservation"""

    event_type: str = "reservation.approved"


@dataclass(kw_only=True)
class ReservationPromotedEvent(ReservationEvent):
    """Emitted when a waitlisted reservation gets a slot"""

    event_type: str = "reservation.promoted"
    new_state: str = None


# Event handlers registry
reservation_event_handlers: Dict[str, List[Callable]] = {
    "reservation.joined": [],
    "reservation.waitlisted": [],
    "reservation.paid": [],
    "reservation.checked_in": [],
    "reservation.approved": [],
    "reservation.promoted": [],
}


def register_event_handler(event_type: str, handler: Callable):
    """Register an event handler"""
    if event_type not in reservation_event_handlers:
        raise ValueError(f"Unknown event type: {event_type}")

    reservation_event_handlers[event_type].append(handler)
    logger.info(f"Registered handler {handler.__name__} for {event_type}")


def unregister_event_handler(event_type: str, handler: Callable):
    """Unregister an event handler"""
    if event_type in reservation_event_handlers:
        reservation_event_handlers[event_type].remove(handler)


async def emit_reservation_event(event: ReservationEvent):
    """Emit a reservation event to all registered handlers"""
    event_type = event.event_type
    handlers = list(reservation_event_handlers.get(event_type, []))

    if not handlers:
        logger.debug(f"No handlers registered for {event_type}")
        return

    logger.debug(f"Emitting {event_type} for reservation {event.reservation_id}")

    tasks = []
    for handler in handlers:
        if asyncio.iscoroutinefunction(handler):
            tasks.append(handler(event))
        else:
            tasks.append(asyncio.to_thread(handler, event))

    results = await asyncio.gather(*tasks, return_exceptions=True)

    # Handler failures never roll back the committed state change
    for handler, result in zip(handlers, results):
        if isinstance(result, Exception):
            logger.error(
                f"Handler {handler.__name__} failed for {event_type}: {result}"
            )


async def log_reservation_event(event: ReservationEvent):
    """Log reservation events for analytics"""
    logger.info(f"Event logged: {event.to_dict()}")


def register_default_handlers():
    for event_type, handlers in reservation_event_handlers.items():
        if log_reservation_event not in handlers:
            register_event_handler(event_type, log_reservation_event)
