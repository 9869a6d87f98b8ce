"""Tests for the current-user, health and error-report routes."""

from collections.abc import Callable
from dataclasses import replace

import httpx
from fastapi.testclient import TestClient

from mimariproje.app import configure_fastapi_app
from mimariproje.config import AppConfig
from mimariproje.proxy import BackendClient
from tests.conftest import BACKEND_URL, TEST_USER, unreachable


def make_client(config: AppConfig, handler: Callable[[httpx.Request], httpx.Response]) -> TestClient:
    backend = BackendClient(BACKEND_URL, transport=httpx.MockTransport(handler))
    return TestClient(configure_fastapi_app(config, backend=backend))


class TestCurrentUser:
    """Test suite for GET /api/auth/user."""

    def test_forwards_authorization(self, app_config: AppConfig) -> None:
        """Test that the inbound bearer token reaches the backend."""
        seen: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200, json={"user": TEST_USER})

        with make_client(app_config, handler) as client:
            response = client.get("/api/auth/user", headers={"Authorization": "Bearer t1"})

        assert response.json() == {"user": TEST_USER}
        assert seen == ["Bearer t1"]

    def test_unreachable_serves_mock_user(self, app_config: AppConfig) -> None:
        """Test that the demo account is served while the backend is down."""
        with make_client(app_config, unreachable) as client:
            response = client.get("/api/auth/user")

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "admin@mimariproje.com"
        assert user["full_name"] == "Admin User"

    def test_unreachable_without_fallback(self, app_config: AppConfig) -> None:
        """Test that the demo account is never served outside development."""
        config = replace(app_config, mock_fallback=False)

        with make_client(config, unreachable) as client:
            response = client.get("/api/auth/user")

        assert response.status_code == 502


    def test_non_json_user_serves_mock(self, app_config: AppConfig) -> None:
        """Test that an unreadable success body falls back like a refused connection."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="OK")

        with make_client(app_config, handler) as client:
            response = client.get("/api/auth/user")

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "admin@mimariproje.com"

class TestHealth:
    """Test suite for GET /api/health."""

    def test_healthy_backend(self, app_config: AppConfig) -> None:
        """Test that the backend's own health is merged with the gateway's."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "success", "database": "OK"})

        with make_client(app_config, handler) as client:
            response = client.get("/api/health")

        assert response.json() == {
            "status": "success",
            "database": "OK",
            "frontend": "OK",
            "backend_connection": "OK",
        }

    def test_unreachable_backend(self, app_config: AppConfig) -> None:
        """Test that health stays 200 and reports the failed connection."""
        with make_client(app_config, unreachable) as client:
            response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "message": "Frontend API çalışıyor",
            "frontend": "OK",
            "backend_connection": "FAILED",
            "fallback_mode": True,
        }

    def test_failing_backend(self, app_config: AppConfig) -> None:
        """Test that a non-2xx backend health counts as a failed connection."""
        config = replace(app_config, mock_fallback=False)

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"status": "error"})

        with make_client(config, handler) as client:
            body = client.get("/api/health").json()

        assert body["backend_connection"] == "FAILED"
        assert body["fallback_mode"] is False


    def test_non_json_backend_health(self, app_config: AppConfig) -> None:
        """Test that a plain-text backend health answer counts as a failed connection."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="OK")

        with make_client(app_config, handler) as client:
            response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["backend_connection"] == "FAILED"
        assert response.json()["frontend"] == "OK"

class TestErrorReport:
    """Test suite for POST /api/error-report."""

    def test_accepts_report(self, app_config: AppConfig) -> None:
        """Test that a boundary report is acknowledged with its id."""
        report = {
            "errorId": "error_1700000000000_abc123def",
            "message": "Cannot read properties of undefined",
            "stack": "TypeError: ...",
            "componentStack": "at ProjectCard",
            "timestamp": "2026-10-17T10:00:00.000Z",
            "url": "/projeler/5",
        }

        with make_client(app_config, unreachable) as client:
            response = client.post("/api/error-report", json=report)

        assert response.status_code == 202
        assert response.json() == {"received": True, "error_id": "error_1700000000000_abc123def"}

    def test_rejects_incomplete_report(self, app_config: AppConfig) -> None:
        """Test that a report without an id is a validation error."""
        with make_client(app_config, unreachable) as client:
            response = client.post("/api/error-report", json={"message": "x"})

        assert response.status_code == 422


def test_root(app_config: AppConfig) -> None:
    """Test the root route."""
    with make_client(app_config, unreachable) as client:
        assert client.get("/").json() == "Mimariproje Gateway"
