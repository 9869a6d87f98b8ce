"""Helpers turning backend responses and failures into proxy responses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    import httpx

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

INTERNAL_ERROR = "Internal Server Error"
BACKEND_UNAVAILABLE = "Backend unavailable"


def error_response(status_code: int, error: str) -> JSONResponse:
    """Create a standardized ``{"error": ...}`` response."""
    return JSONResponse({"error": error}, status_code=status_code)


def internal_error(error: str = INTERNAL_ERROR) -> JSONResponse:
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, error)


def relay_error(response: httpx.Response, default: dict[str, Any]) -> JSONResponse:
    """Forward a non-2xx backend response with its status.

    The backend body is relayed when it parses as JSON, ``default`` otherwise.

    :param response: The backend response
    :param default: Body used when the backend body is not JSON
    """
    try:
        body = response.json()
    except ValueError:
        body = default
    return JSONResponse(body, status_code=response.status_code)


def relay_error_text(response: httpx.Response) -> JSONResponse:
    """Forward a non-2xx backend response, wrapping non-JSON text as ``error``."""
    try:
        body = response.json()
    except ValueError:
        body = {"error": response.text}
    return JSONResponse(body, status_code=response.status_code)


def unavailable(mock_payload: dict[str, Any] | None) -> JSONResponse:
    """Answer a GET whose backend could not be reached.

    :param mock_payload: Substitute body when mock fallback is enabled, else None
    :return: 200 with the mock payload, or 502 when no fallback applies
    """
    if mock_payload is not None:
        LOGGER.warning("Backend unreachable, serving mock data")
        return JSONResponse(mock_payload)
    return error_response(status.HTTP_502_BAD_GATEWAY, BACKEND_UNAVAILABLE)
