"""Shared fixtures for the gateway test suite."""

from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest

from mimariproje.common import HistoryNavigator
from mimariproje.config import AppConfig
from mimariproje.session import LocalStorage

API_BASE_URL = "http://backend.test/api"
BACKEND_URL = "http://backend.test"

TEST_USER = {
    "id": 7,
    "email": "ayse@example.com",
    "first_name": "Ayşe",
    "last_name": "Yılmaz",
    "user_type": "individual",
    "is_verified": True,
}

Handler = Callable[[httpx.Request], Awaitable[httpx.Response]]


@pytest.fixture
async def storage() -> AsyncIterator[LocalStorage]:
    """Create an in-memory storage area shared by the sessions of a test."""
    local_storage = await LocalStorage.create(":memory:")
    yield local_storage
    await local_storage.close()


@pytest.fixture
def navigator() -> HistoryNavigator:
    """Create a navigator that records visited routes."""
    return HistoryNavigator()


@pytest.fixture
def app_config() -> AppConfig:
    """Create a development configuration pointing at a fake backend."""
    return AppConfig(
        backend_url=BACKEND_URL,
        public_api_url=API_BASE_URL,
        environment="development",
        mock_fallback=True,
        backend_timeout=None,
        storage_path=":memory:",
        error_report_url="/api/error-report",
        telemetry_enabled=False,
        error_log_limit=10,
        logging_level="DEBUG",
        root_path="",
    )


def mock_client(handler: Handler) -> httpx.AsyncClient:
    """Create an httpx client answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def unreachable(request: httpx.Request) -> httpx.Response:
    """Handler simulating a refused backend connection."""
    msg = "Connection refused"
    raise httpx.ConnectError(msg, request=request)
