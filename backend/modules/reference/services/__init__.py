from .reference_service import ReferenceDataService

__all__ = ["ReferenceDataService"]
