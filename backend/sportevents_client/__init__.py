"""
Async HTTP client for the SportEvents API.
"""

from .session import SessionState, RefreshPolicy
from .api_client import SportEventsClient, ClientError

__all__ = ["SessionState", "RefreshPolicy", "SportEventsClient", "ClientError"]
