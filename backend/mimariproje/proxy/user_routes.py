"""Proxy route for the current user."""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Header, Response
from fastapi.responses import JSONResponse

from .backend import BackendClient
from .mocks import mock_user_payload
from .relay import internal_error, relay_error, unavailable

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

USER_PATH = "/api/auth/user"
USER_FAILED = "Kullanıcı bilgileri alınırken bir hata oluştu"


async def _current_user(
    backend: BackendClient,
    authorization: str | None,
    *,
    mock_fallback: bool,
) -> JSONResponse:
    try:
        response = await backend.request("GET", USER_PATH, authorization=authorization)
    except httpx.TransportError:
        return unavailable(mock_user_payload() if mock_fallback else None)

    if not response.is_success:
        return relay_error(response, {"message": "Backend error"})

    try:
        return JSONResponse(response.json())
    except ValueError:
        LOGGER.warning("Backend sent a non-JSON current user")
        return unavailable(mock_user_payload() if mock_fallback else None)


def configure_user_router(
    router: APIRouter,
    backend: BackendClient,
    *,
    mock_fallback: bool,
) -> APIRouter:
    """Configure the current-user proxy route.

    :param router: The APIRouter to configure
    :param backend: Client for the backend service
    :param mock_fallback: Whether an unreachable backend yields the demo user
    :return: The configured APIRouter
    """

    @router.get("/auth/user")
    async def current_user(
        authorization: Annotated[str | None, Header()] = None,
    ) -> Response:
        try:
            return await _current_user(backend, authorization, mock_fallback=mock_fallback)
        except Exception:
            LOGGER.exception("Fetching the current user failed")
            return internal_error(USER_FAILED)

    return router
