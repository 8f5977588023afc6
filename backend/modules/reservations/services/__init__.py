from .reservation_service import ReservationService, JoinResult
from .deadline import is_within_deadline, check_in_deadline_for

__all__ = [
    "ReservationService",
    "JoinResult",
    "is_within_deadline",
    "check_in_deadline_for",
]
