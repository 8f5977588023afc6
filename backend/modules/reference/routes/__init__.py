from .reference_routes import router

__all__ = ["router"]
