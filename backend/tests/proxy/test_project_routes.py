"""Tests for the project proxy routes."""

import json
from collections.abc import Callable
from dataclasses import replace

import httpx
import pytest
from fastapi.testclient import TestClient

from mimariproje.app import configure_fastapi_app
from mimariproje.config import AppConfig
from mimariproje.proxy import BackendClient
from tests.conftest import BACKEND_URL, unreachable

SyncHandler = Callable[[httpx.Request], httpx.Response]

PROJECT_FORM = {
    "title": "  Bahçeli Ev  ",
    "description": "İki katlı müstakil ev",
    "category": "residential",
    "price": "2500.50",
    "area": "180",
    "specializations": '["Villa", "Modern"]',
}

EXPECTED_SPECIFICATIONS = {
    "totalArea": 320,
    "buildingArea": "-",
    "gardenArea": "-",
    "floors": "-",
    "rooms": "-",
    "bathrooms": "-",
    "garage": "-",
    "features": [],
}


def make_client(config: AppConfig, handler: SyncHandler) -> TestClient:
    backend = BackendClient(BACKEND_URL, transport=httpx.MockTransport(handler))
    return TestClient(configure_fastapi_app(config, backend=backend))


class TestListProjects:
    """Test suite for GET /api/projects."""

    def test_relays_backend_json_with_query(self, app_config: AppConfig) -> None:
        """Test that the query string is forwarded and the body relayed."""
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json={"projects": [{"id": 3}], "pagination": {"page": 2}})

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects", params={"page": "2", "category": "villa"})

        assert response.status_code == 200
        assert response.json() == {"projects": [{"id": 3}], "pagination": {"page": 2}}
        assert seen[0].path == "/api/projects"
        assert dict(seen[0].params) == {"page": "2", "category": "villa"}

    def test_unreachable_backend_serves_mock(self, app_config: AppConfig) -> None:
        """Test that a refused connection yields the demo listing in development."""
        with make_client(app_config, unreachable) as client:
            response = client.get("/api/projects")

        assert response.status_code == 200
        body = response.json()
        assert isinstance(body["projects"], list)
        assert len(body["projects"]) == 1
        assert body["pagination"] == {
            "page": 1,
            "per_page": 12,
            "total": 1,
            "pages": 1,
            "has_next": False,
            "has_prev": False,
        }

    def test_unreachable_backend_without_fallback(self, app_config: AppConfig) -> None:
        """Test that a refused connection is a 502 when mock fallback is off."""
        config = replace(app_config, environment="production", mock_fallback=False)

        with make_client(config, unreachable) as client:
            response = client.get("/api/projects")

        assert response.status_code == 502
        assert response.json() == {"error": "Backend unavailable"}

    def test_backend_error_is_relayed(self, app_config: AppConfig) -> None:
        """Test that a non-2xx backend answer keeps its status and body."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "Bakımda"})

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects")

        assert response.status_code == 503
        assert response.json() == {"error": "Bakımda"}


    def test_non_json_listing_serves_mock(self, app_config: AppConfig) -> None:
        """Test that an unreadable success body is treated like an unreachable backend."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy page</html>")

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects")

        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1

class TestCreateProject:
    """Test suite for POST /api/projects."""

    def test_missing_fields(self, app_config: AppConfig) -> None:
        """Test that required fields are checked before authorization."""
        with make_client(app_config, unreachable) as client:
            response = client.post("/api/projects", data={"title": "Eksik"})

        assert response.status_code == 400
        assert response.json() == {"error": "Gerekli alanlar eksik"}

    def test_missing_token(self, app_config: AppConfig) -> None:
        """Test that creation without a header or cookie token is refused."""
        with make_client(app_config, unreachable) as client:
            response = client.post("/api/projects", data=PROJECT_FORM)

        assert response.status_code == 401
        assert response.json() == {"error": "Yetkilendirme gerekli"}

    def test_creates_with_cookie_token(self, app_config: AppConfig) -> None:
        """Test the payload built from the form and the cookie token."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"success": True, "data": {"id": 11}})

        with make_client(app_config, handler) as client:
            client.cookies.set("mimariproje_access_token", "cookie-token")
            response = client.post("/api/projects", data=PROJECT_FORM)

        assert response.status_code == 201
        assert response.json() == {"success": True, "data": {"id": 11}}
        assert seen[0].headers["authorization"] == "Bearer cookie-token"
        assert json.loads(seen[0].content) == {
            "title": "Bahçeli Ev",
            "description": "İki katlı müstakil ev",
            "category": "residential",
            "price": 2500.5,
            "area": "180",
            "tags": ["Villa", "Modern"],
        }

    def test_invalid_specializations_and_price(self, app_config: AppConfig) -> None:
        """Test that bad JSON yields empty tags and a bad price yields zero."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        form = {**PROJECT_FORM, "price": "pazarlık", "specializations": "[Villa"}
        with make_client(app_config, handler) as client:
            client.post("/api/projects", data=form, headers={"Authorization": "Bearer header-token"})

        payload = json.loads(seen[0].content)
        assert payload["price"] == 0
        assert payload["tags"] == []
        assert seen[0].headers["authorization"] == "Bearer header-token"

    @pytest.mark.parametrize(
        ("price", "expected"),
        [("150000 TL", 150000), ("1,5", 1), (" .5e3 m2", 500), ("TL 100", 0)],
    )
    def test_price_uses_leading_number(
        self,
        app_config: AppConfig,
        price: str,
        expected: float,
    ) -> None:
        """Test that the price keeps the number a listing starts with."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        with make_client(app_config, handler) as client:
            client.post(
                "/api/projects",
                data={**PROJECT_FORM, "price": price},
                headers={"Authorization": "Bearer header-token"},
            )

        assert json.loads(seen[0].content)["price"] == expected

    def test_backend_text_error(self, app_config: AppConfig) -> None:
        """Test that a plain-text backend error is wrapped as error."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(422, text="Fiyat geçersiz")

        with make_client(app_config, handler) as client:
            response = client.post(
                "/api/projects",
                data=PROJECT_FORM,
                headers={"Authorization": "Bearer header-token"},
            )

        assert response.status_code == 422
        assert response.json() == {"error": "Fiyat geçersiz"}

    def test_unreachable_backend_is_500(self, app_config: AppConfig) -> None:
        """Test that mutating routes never fall back to mock data."""
        with make_client(app_config, unreachable) as client:
            response = client.post(
                "/api/projects",
                data=PROJECT_FORM,
                headers={"Authorization": "Bearer header-token"},
            )

        assert response.status_code == 500
        assert response.json() == {"error": "Proje eklenirken bir hata oluştu"}


class TestProjectDetail:
    """Test suite for GET and DELETE /api/projects/{id}."""

    def test_missing_specifications_get_defaults(self, app_config: AppConfig) -> None:
        """Test that a sparse backend record is completed with defaults."""
        record = {
            "id": 5,
            "title": "Sahil Villası",
            "price": "1500000",
            "area": 320,
            "project_images": [{"image_url": "/uploads/a.jpg"}, {"image_url": "/uploads/b.jpg"}],
            "users": {"id": 2, "email": "admin@mimariproje.com"},
        }

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "data": {"project": record}})

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects/5")

        assert response.status_code == 200
        project = response.json()["data"]["project"]
        assert project["specifications"] == EXPECTED_SPECIFICATIONS
        assert project["images"] == ["/uploads/a.jpg", "/uploads/b.jpg"]
        assert project["user"] == {"id": 2, "email": "admin@mimariproje.com"}
        assert project["price"] == 1500000
        assert project["tags"] == []
        assert project["deliverables"] == []
        assert project["reviews"] == []
        assert project["license"] == {
            "type": "Standart",
            "description": "Lisans bilgisi bulunamadı.",
            "modifications": "-",
            "resale": "-",
        }

    def test_unsuccessful_envelope_is_untouched(self, app_config: AppConfig) -> None:
        """Test that payloads without a project are relayed unchanged."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "Yok"})

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects/9")

        assert response.json() == {"success": False, "error": "Yok"}

    def test_not_found_is_relayed(self, app_config: AppConfig) -> None:
        """Test that a backend 404 keeps its status."""

        def handler(_: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "Proje bulunamadı"})

        with make_client(app_config, handler) as client:
            response = client.get("/api/projects/404")

        assert response.status_code == 404
        assert response.json() == {"error": "Proje bulunamadı"}

    @pytest.mark.parametrize(
        ("backend_status", "backend_body", "expected_body"),
        [
            (200, b'{"success": true}', {"success": True}),
            (403, b"nope", {"error": "Delete failed"}),
        ],
    )
    def test_delete(
        self,
        app_config: AppConfig,
        backend_status: int,
        backend_body: bytes,
        expected_body: dict[str, object],
    ) -> None:
        """Test that deletions forward authorization and relay the answer."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(backend_status, content=backend_body)

        with make_client(app_config, handler) as client:
            response = client.delete("/api/projects/5", headers={"Authorization": "Bearer t"})

        assert response.status_code == backend_status
        assert response.json() == expected_body
        assert seen[0].method == "DELETE"
        assert seen[0].headers["authorization"] == "Bearer t"

    def test_delete_unreachable_is_500(self, app_config: AppConfig) -> None:
        """Test that a refused connection during deletion is a 500."""
        with make_client(app_config, unreachable) as client:
            response = client.delete("/api/projects/5")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
