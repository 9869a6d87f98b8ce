"""HTTP client used by sessions to talk to the marketplace backend.

The philosophy is to never raise for HTTP or transport failures: every call
resolves to an :class:`ApiResponse` so callers branch on ``success`` only.
A 401 on an authenticated call triggers one token refresh and one retry;
when the refresh fails the session is considered expired.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from mimariproje.common import ApiResponse
from mimariproje.common.navigation import LOGIN_ROUTE, HistoryNavigator

if TYPE_CHECKING:
    from mimariproje.common.navigation import Navigator
    from mimariproje.session.tokens import TokenManager

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

REFRESH_ENDPOINT = "/auth/refresh"


def _parse_body(response: httpx.Response) -> Any:
    """Return the JSON body when the response declares JSON, else the text."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            LOGGER.warning("Malformed JSON body from %s", response.request.url)
    return response.text


def _error_message(payload: Any, status_code: int) -> str:
    if isinstance(payload, dict):
        error = payload.get("error") or payload.get("message")
        if error:
            return str(error)
    return f"HTTP {status_code}"


def _message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        message = payload.get("message")
        return str(message) if message is not None else None
    return None


class ApiClient:
    """Backend client that attaches the session's bearer token.

    :param base_url: Public API base URL, e.g. ``http://localhost:5000/api``
    :param token_manager: Token storage of the owning session
    :param navigator: Used to open the login route when the session expires
    :param http_client: Optional pre-configured httpx client
    :param timeout: Request timeout in seconds when creating the client
    """

    def __init__(
        self,
        base_url: str,
        token_manager: TokenManager,
        *,
        navigator: Navigator | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_manager = token_manager
        self.navigator = navigator or HistoryNavigator()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        files: dict[str, Any] | None = None,
        retry_on_unauthorized: bool = True,
    ) -> ApiResponse:
        """Send a request to the backend and wrap the outcome.

        :param method: HTTP method
        :param endpoint: Path relative to the base URL, starting with ``/``
        :param json: Optional JSON body
        :param files: Optional multipart files, used instead of a JSON body
        :param retry_on_unauthorized: Whether a 401 may trigger a refresh and retry
        :return: ApiResponse describing the result
        """
        headers: dict[str, str] = {}
        token = await self.token_manager.get_access_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{endpoint}",
                json=json,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            LOGGER.error("API request %s %s failed: %s", method, endpoint, e)
            return ApiResponse.fail(str(e) or "Network error")

        payload = _parse_body(response)

        if response.is_success:
            return ApiResponse.ok(payload, message=_message(payload))

        if response.status_code == httpx.codes.UNAUTHORIZED and token and retry_on_unauthorized:
            LOGGER.info("401 Unauthorized at %s, attempting token refresh", endpoint)
            if await self.refresh_tokens():
                LOGGER.info("Token refresh successful, retrying %s", endpoint)
                return await self.request(
                    method,
                    endpoint,
                    json=json,
                    files=files,
                    retry_on_unauthorized=False,
                )
            LOGGER.info("Token refresh failed, redirecting to login")
            await self.token_manager.clear_tokens()
            self.navigator.navigate(LOGIN_ROUTE)

        return ApiResponse.fail(_error_message(payload, response.status_code))

    async def refresh_tokens(self) -> bool:
        """Exchange the stored refresh token for a new token pair.

        :return: True if a new pair was stored, False otherwise
        """
        refresh_token = await self.token_manager.get_refresh_token()
        if not refresh_token:
            return False

        try:
            response = await self._client.post(
                f"{self.base_url}{REFRESH_ENDPOINT}",
                json={"refresh_token": refresh_token},
            )
        except httpx.HTTPError as e:
            LOGGER.error("Token refresh failed: %s", e)
            return False

        if not response.is_success:
            return False

        payload = _parse_body(response)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            LOGGER.warning("Token refresh response carried no access token")
            return False

        await self.token_manager.set_tokens(
            payload["access_token"],
            payload.get("refresh_token") or refresh_token,
        )
        return True

    async def get(self, endpoint: str) -> ApiResponse:
        return await self.request("GET", endpoint)

    async def post(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.request("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> ApiResponse:
        return await self.request("DELETE", endpoint)

    async def upload(self, endpoint: str, files: dict[str, Any]) -> ApiResponse:
        """Post a multipart form with the given files."""
        return await self.request("POST", endpoint, files=files)
