from .reference_models import Sport, SportGoal, EventStyle, Facility, Salon

__all__ = ["Sport", "SportGoal", "EventStyle", "Facility", "Salon"]
