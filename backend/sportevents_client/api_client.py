"""
SportEventsClient: typed access to the participant reservation flow.

Mirrors what the web client does on every call: send the bearer token and
the CSRF header, adopt a rotated token from the ``Authorization`` response
header and drop the token when the server answers 401.
"""

from typing import Any, Dict, List, Optional, Tuple
import re
import logging

import httpx

from core.config import settings
from .session import SessionState, RefreshPolicy

logger = logging.getLogger(__name__)

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)
UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class ClientError(Exception):
    """Non-success response from the API"""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.error_code = error_code


def extract_bearer_token(response: httpx.Response) -> Optional[str]:
    header = response.headers.get("Authorization")
    if not header:
        return None
    match = BEARER_PATTERN.match(header.strip())
    return match.group(1) if match else None


class SportEventsClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[SessionState] = None,
        policy: Optional[RefreshPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        api_prefix: str = "/api/v1",
        timeout: float = 30.0,
    ):
        self.session = session or SessionState()
        self.policy = policy or RefreshPolicy()
        self.api_prefix = api_prefix
        self.http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "SportEventsClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.http.aclose()

    @property
    def csrf_token(self) -> Optional[str]:
        return self.http.cookies.get(settings.csrf_cookie_name)

    # Participant operations

    async def make_reservation(
        self, event_id: int, secret_id: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"eventId": event_id}
        if secret_id:
            payload["secretId"] = secret_id
        body = await self._request("POST", "/participant/make-reservation", json=payload)
        return body["data"]

    async def confirm_payment(self, event_id: int, auto_check_in: bool = False) -> Dict[str, Any]:
        body = await self._request(
            "POST",
            "/participant/confirm-payment",
            json={"eventId": event_id, "autoCheckIn": auto_check_in},
        )
        return body["data"]

    async def check_in(self, event_id: int) -> Dict[str, Any]:
        body = await self._request("POST", "/participant/check-in", json={"eventId": event_id})
        return body["data"]

    # Catalog

    async def list_events(self, **filters) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Search public events; filters use the API's camelCase names."""
        try:
            body = await self._request("POST", "/get-event", json=filters)
        except ClientError as e:
            if e.status_code == 404:
                return [], {}
            raise
        return body["data"], body.get("pagination") or {}

    async def get_event(self, event_id: int) -> Dict[str, Any]:
        body = await self._request("GET", f"/get-event/{event_id}")
        return body["data"]

    # Session handling

    async def refresh(self):
        """Exchange the refresh cookie for a new access token."""
        await self._ensure_csrf_cookie()
        response = await self.http.post(
            f"{self.api_prefix}/auth/refresh", headers=self._csrf_headers()
        )
        if response.status_code != 200:
            self.session.clear()
            raise self._error_from(response)

        token = extract_bearer_token(response) or response.json()["data"]["accessToken"]
        self.session.set_access_token(token)
        logger.debug("Access token refreshed")

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if self.policy.should_refresh(self.session):
            await self.refresh()

        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        if method in UNSAFE_METHODS:
            await self._ensure_csrf_cookie()
            headers.update(self._csrf_headers())

        response = await self.http.request(
            method, f"{self.api_prefix}{path}", json=json, headers=headers
        )

        rotated = extract_bearer_token(response)
        if rotated:
            self.session.set_access_token(rotated)
        if response.status_code == 401:
            self.session.clear()

        if response.status_code >= 400:
            raise self._error_from(response)
        return response.json()

    async def _ensure_csrf_cookie(self):
        # Any safe request makes the server issue the cookie
        if self.csrf_token is None:
            await self.http.get("/health")

    def _csrf_headers(self) -> Dict[str, str]:
        token = self.csrf_token
        return {settings.csrf_header_name: token} if token else {}

    @staticmethod
    def _error_from(response: httpx.Response) -> ClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        return ClientError(
            response.status_code,
            body.get("error") or response.reason_phrase,
            body.get("error_code"),
        )
