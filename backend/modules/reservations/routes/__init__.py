from .reservation_routes import router as participant_router
from .coach_reservation_routes import router as coach_router

__all__ = ["participant_router", "coach_router"]
