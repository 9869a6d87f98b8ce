"""Health check of the gateway and its backend."""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from .backend import BackendClient
from .models import HealthStatus

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

HEALTH_PATH = "/api/health"


async def _backend_health(backend: BackendClient) -> dict[str, Any] | None:
    """Return the backend's own health answer, None when it cannot give one."""
    try:
        response = await backend.request("GET", HEALTH_PATH)
    except httpx.TransportError:
        return None
    if not response.is_success:
        return None

    try:
        data = response.json()
    except ValueError:
        LOGGER.warning("Backend health answer is not JSON")
        return None
    return data if isinstance(data, dict) else {"backend": data}


async def _check_backend(backend: BackendClient, *, mock_fallback: bool) -> JSONResponse:
    data = await _backend_health(backend)
    if data is None:
        LOGGER.warning("Backend health check failed")
        degraded = HealthStatus(fallback_mode=mock_fallback)
        return JSONResponse(degraded.model_dump())
    return JSONResponse({**data, "frontend": "OK", "backend_connection": "OK"})


def configure_health_router(
    router: APIRouter,
    backend: BackendClient,
    *,
    mock_fallback: bool,
) -> APIRouter:
    """Configure the health route.

    :param router: The APIRouter to configure
    :param backend: Client for the backend service
    :param mock_fallback: Reported as ``fallback_mode`` when the backend is down
    :return: The configured APIRouter
    """

    @router.get("/health")
    async def health() -> Response:
        try:
            return await _check_backend(backend, mock_fallback=mock_fallback)
        except Exception:
            LOGGER.exception("Health check failed")
            return JSONResponse(
                {"status": "error", "message": "Health check failed", "frontend": "ERROR"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    return router
