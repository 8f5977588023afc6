from .profile_routes import participant_router, coach_router

__all__ = ["participant_router", "coach_router"]
