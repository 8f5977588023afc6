from .event_routes import coach_router, catalog_router

__all__ = ["coach_router", "catalog_router"]
