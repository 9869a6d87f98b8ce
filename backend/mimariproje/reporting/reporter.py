"""Telemetry for client-side errors with a local fallback log."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from mimariproje.session.storage_exceptions import StorageError

if TYPE_CHECKING:
    from mimariproje.config import AppConfig
    from mimariproje.session.storage import LocalStorage

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

ERROR_LOG_KEY = "error_logs"
DEFAULT_LOG_LIMIT = 10


class ErrorReporter:
    """Sends error reports to the telemetry endpoint.

    A report that cannot be delivered is appended to a capped JSON log in
    local storage instead. Neither path ever raises to the caller.

    :param storage: Storage area holding the fallback log
    :param endpoint: URL of the error-report receiver
    :param enabled: Whether reports are sent at all
    :param log_limit: Number of entries kept in the fallback log
    :param base_url: Base URL used to resolve a relative endpoint
    :param http_client: Optional pre-configured httpx client
    :param timeout: Request timeout in seconds when creating the client
    """

    def __init__(
        self,
        storage: LocalStorage,
        *,
        endpoint: str,
        enabled: bool,
        log_limit: int = DEFAULT_LOG_LIMIT,
        base_url: str = "",
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.storage = storage
        self.endpoint = endpoint
        self.enabled = enabled
        self.log_limit = log_limit
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        storage: LocalStorage,
        *,
        base_url: str = "",
        http_client: httpx.AsyncClient | None = None,
    ) -> ErrorReporter:
        """Build a reporter from ``ERROR_REPORT_URL``, ``TELEMETRY_ENABLED`` and ``ERROR_LOG_LIMIT``.

        :param config: Application configuration
        :param storage: Storage area holding the fallback log
        :param base_url: Origin a relative report URL is resolved against
        :param http_client: Optional pre-configured httpx client
        :return: Configured ErrorReporter
        """
        return cls(
            storage,
            endpoint=config.error_report_url,
            enabled=config.telemetry_enabled,
            log_limit=config.error_log_limit,
            base_url=base_url,
            http_client=http_client,
            timeout=config.backend_timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def report(self, report: dict[str, Any], log_entry: dict[str, Any] | None = None) -> bool:
        """Deliver a report, falling back to the local log.

        :param report: JSON body sent to the endpoint
        :param log_entry: Entry stored locally on failure, defaults to ``report``
        :return: True if the endpoint accepted the report
        """
        if not self.enabled:
            LOGGER.error("Client error (telemetry disabled): %s", report)
            return False

        try:
            response = await self._client.post(self.endpoint, json=report)
            response.raise_for_status()
        except httpx.HTTPError as e:
            LOGGER.warning("Error report could not be delivered: %s", e)
            await self.append_log(log_entry if log_entry is not None else report)
            return False
        return True

    async def append_log(self, entry: dict[str, Any]) -> None:
        """Append ``entry`` to the local log, keeping the newest entries only."""
        try:
            logs = await self.stored_logs()
            logs.append(entry)
            await self.storage.set_item(ERROR_LOG_KEY, json.dumps(logs[-self.log_limit :]))
        except (StorageError, TypeError) as e:
            LOGGER.error("Failed to store error log: %s", e)

    async def stored_logs(self) -> list[Any]:
        """Return the local log; a malformed log reads as empty."""
        raw = await self.storage.get_item(ERROR_LOG_KEY)
        if not raw:
            return []
        try:
            logs = json.loads(raw)
        except ValueError:
            LOGGER.warning("Discarding malformed error log")
            return []
        return logs if isinstance(logs, list) else []
