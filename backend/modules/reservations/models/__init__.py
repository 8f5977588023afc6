from .reservation_models import (
    Reservation,
    ReservationState,
    ALLOWED_TRANSITIONS,
    CONFIRMED_STATES,
    can_transition,
)
from .audit_models import ReservationAuditLog, AuditAction

__all__ = [
    "Reservation",
    "ReservationState",
    "ALLOWED_TRANSITIONS",
    "CONFIRMED_STATES",
    "can_transition",
    "ReservationAuditLog",
    "AuditAction",
]
