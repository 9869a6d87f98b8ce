"""Outbound connection from the proxy routes to the backend service."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class BackendClient:
    """Forwards proxy requests to the configured backend origin.

    Transport failures (refused connections, timeouts) propagate as
    ``httpx.TransportError`` so each route can pick its own fallback.

    :param base_url: Backend origin, e.g. ``http://localhost:5000``
    :param timeout: Request timeout in seconds, None to wait indefinitely
    :param transport: Optional custom transport, used by tests
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | list[tuple[str, str]] | None = None,
        authorization: str | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request to the backend.

        :param method: HTTP method
        :param path: Backend path, e.g. ``/api/projects``
        :param params: Query parameters forwarded as-is
        :param authorization: Inbound Authorization header, forwarded when present
        :param json: Optional JSON body
        :return: The backend response, whatever its status
        :raises httpx.TransportError: If the backend cannot be reached
        """
        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        start_time = time.monotonic()
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                headers=headers,
                json=json,
            )
        except httpx.TransportError as e:
            LOGGER.warning("Backend unreachable for %s %s: %s", method, path, e)
            raise

        duration_ms = int((time.monotonic() - start_time) * 1000)
        if response.status_code >= 400:  # noqa: PLR2004
            LOGGER.warning(
                "Backend returned %s for %s %s in %d ms",
                response.status_code,
                method,
                path,
                duration_ms,
            )
        else:
            LOGGER.debug("Backend %s %s -> %s in %d ms", method, path, response.status_code, duration_ms)
        return response
