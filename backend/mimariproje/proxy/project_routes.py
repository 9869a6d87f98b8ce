"""Proxy routes for project listings.

Forwards listing, creation, detail and deletion requests to the backend.
The listing falls back to demo data when the backend is unreachable and
mock fallback is enabled; mutating routes answer 500 instead.
"""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Cookie, Form, Header, Request, Response, status
from fastapi.responses import JSONResponse

from mimariproje.session.tokens import ACCESS_TOKEN_KEY

from .backend import BackendClient
from .mocks import mock_projects_payload
from .models import ProjectForm
from .relay import error_response, internal_error, relay_error, relay_error_text, unavailable
from .transform import normalize_project_detail

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

PROJECTS_PATH = "/api/projects"

MISSING_FIELDS = "Gerekli alanlar eksik"
AUTH_REQUIRED = "Yetkilendirme gerekli"
LIST_FAILED = "Projeler yüklenirken bir hata oluştu"
CREATE_FAILED = "Proje eklenirken bir hata oluştu"


def _resolve_authorization(authorization: str | None, cookie_token: str | None) -> str | None:
    """Prefer the Authorization header, fall back to the access-token cookie."""
    if authorization:
        return authorization
    if cookie_token:
        return f"Bearer {cookie_token}"
    return None


async def _list_projects(
    backend: BackendClient,
    query: list[tuple[str, str]],
    *,
    mock_fallback: bool,
) -> JSONResponse:
    try:
        response = await backend.request("GET", PROJECTS_PATH, params=query)
    except httpx.TransportError:
        return unavailable(mock_projects_payload() if mock_fallback else None)

    if not response.is_success:
        return relay_error(response, {"message": "Backend error"})

    try:
        return JSONResponse(response.json())
    except ValueError:
        LOGGER.warning("Backend sent a non-JSON project listing")
        return unavailable(mock_projects_payload() if mock_fallback else None)


async def _create_project(
    backend: BackendClient,
    form: ProjectForm,
    authorization: str | None,
) -> JSONResponse:
    if not form.has_required_fields():
        return error_response(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS)
    if authorization is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, AUTH_REQUIRED)

    project_data = form.to_backend_payload()
    LOGGER.debug("Creating project %r", project_data["title"])
    try:
        response = await backend.request(
            "POST",
            PROJECTS_PATH,
            authorization=authorization,
            json=project_data,
        )
    except httpx.TransportError:
        return internal_error(CREATE_FAILED)

    if not response.is_success:
        LOGGER.error("Backend rejected project creation: %s", response.text)
        return relay_error_text(response)
    return JSONResponse(response.json(), status_code=status.HTTP_201_CREATED)


async def _get_project(
    backend: BackendClient,
    project_id: str,
    authorization: str | None,
) -> JSONResponse:
    try:
        response = await backend.request(
            "GET",
            f"{PROJECTS_PATH}/{project_id}",
            authorization=authorization,
        )
    except httpx.TransportError:
        return internal_error()

    if not response.is_success:
        return relay_error(response, {"message": "Backend error"})
    return JSONResponse(normalize_project_detail(response.json()))


async def _delete_project(
    backend: BackendClient,
    project_id: str,
    authorization: str | None,
) -> Response:
    try:
        response = await backend.request(
            "DELETE",
            f"{PROJECTS_PATH}/{project_id}",
            authorization=authorization,
        )
    except httpx.TransportError:
        return internal_error()

    if not response.is_success:
        return relay_error(response, {"error": "Delete failed"})
    if response.status_code == status.HTTP_204_NO_CONTENT or not response.content:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(response.json())


def configure_project_router(
    router: APIRouter,
    backend: BackendClient,
    *,
    mock_fallback: bool,
) -> APIRouter:
    """Configure the project proxy routes.

    :param router: The APIRouter to configure
    :param backend: Client for the backend service
    :param mock_fallback: Whether an unreachable backend yields demo data
    :return: The configured APIRouter
    """

    @router.get("/projects")
    async def list_projects(request: Request) -> Response:
        try:
            return await _list_projects(
                backend,
                list(request.query_params.multi_items()),
                mock_fallback=mock_fallback,
            )
        except Exception:
            LOGGER.exception("Listing projects failed")
            return internal_error(LIST_FAILED)

    @router.post("/projects")
    async def create_project(
        form: Annotated[ProjectForm, Form()],
        authorization: Annotated[str | None, Header()] = None,
        access_token: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_KEY)] = None,
    ) -> Response:
        try:
            return await _create_project(
                backend,
                form,
                _resolve_authorization(authorization, access_token),
            )
        except Exception:
            LOGGER.exception("Creating project failed")
            return internal_error(CREATE_FAILED)

    @router.get("/projects/{project_id}")
    async def get_project(
        project_id: str,
        authorization: Annotated[str | None, Header()] = None,
    ) -> Response:
        LOGGER.debug("GET request for project %s", project_id)
        try:
            return await _get_project(backend, project_id, authorization)
        except Exception:
            LOGGER.exception("Fetching project %s failed", project_id)
            return internal_error()

    @router.delete("/projects/{project_id}")
    async def delete_project(
        project_id: str,
        authorization: Annotated[str | None, Header()] = None,
    ) -> Response:
        try:
            return await _delete_project(backend, project_id, authorization)
        except Exception:
            LOGGER.exception("Deleting project %s failed", project_id)
            return internal_error()

    return router
