"""HTTP client for the patient records API."""

from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx

from patient_portal.config import settings
from patient_portal.core.events import SessionEvents, SessionExpired
from patient_portal.core.logging import logger
from patient_portal.shared.exceptions import ApiError, AuthError, NetworkError


class SessionContext(Protocol):
    """What the client needs from the session holder."""

    @property
    def token(self) -> Optional[str]: ...

    def invalidate(self, token: Optional[str]) -> bool: ...


class ApiClient:
    """
    Async JSON client that authorizes every request with the session token.

    A 401 from any endpoint invalidates the session and publishes a single
    SessionExpired event, no matter how many requests fail concurrently.
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        events: Optional[SessionEvents] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.base_url = base_url or settings.api_base_url
        self.events = events or SessionEvents()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            AuthError: On 401; the session has already been cleared
            ApiError: On any other non-2xx response
            NetworkError: If the server could not be reached
        """
        token = self.session.token
        try:
            response = await self._client.request(
                method,
                path,
                json=body,
                params=params,
                headers=self._headers(token),
            )
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out")
            raise NetworkError("Request to API server timed out") from e
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkError() from e

        if response.status_code == 401:
            message, details = self._error_body(response)
            self._handle_unauthorized(path, token)
            raise AuthError(server_message=message, details=details)

        if not response.is_success:
            message, details = self._error_body(response)
            logger.debug(f"{method} {path} returned {response.status_code}")
            raise ApiError(
                f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                server_message=message,
                details=details,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                "Invalid JSON in API response",
                status_code=response.status_code,
            ) from e

    def _handle_unauthorized(self, path: str, token: Optional[str]) -> None:
        # Only the request that actually ends the session publishes the event
        if self.session.invalidate(token):
            logger.warning(f"Session expired (401 from {path})")
            self.events.publish(SessionExpired(path=path))

    @staticmethod
    def _error_body(response: httpx.Response) -> Tuple[Optional[str], List[str]]:
        """Extract the server's error message and detail list, if any."""
        try:
            data = response.json()
        except ValueError:
            return None, []
        if not isinstance(data, dict):
            return None, []

        message = data.get("error") or data.get("message")
        details = data.get("details")
        if not isinstance(details, list):
            details = []
        return (str(message) if message else None), [str(d) for d in details]

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Optional[Any] = None) -> Any:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: Optional[Any] = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
