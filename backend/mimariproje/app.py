"""FastAPI application factory for the Mimariproje gateway."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mimariproje.config import AppConfig, configure_logging, load_config_from_env
from mimariproje.proxy import (
    BackendClient,
    configure_health_router,
    configure_project_router,
    configure_report_router,
    configure_user_router,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

LOGGER = logging.getLogger(__name__)


def configure_fastapi_app(config: AppConfig, backend: BackendClient | None = None) -> FastAPI:
    """Configure and return the FastAPI application.

    :param config: Application configuration
    :param backend: Optional backend client, created from the config when omitted
    :return: Configured FastAPI application
    """
    backend = backend or BackendClient(config.backend_url, timeout=config.backend_timeout)

    if config.mock_fallback and not config.is_development:
        LOGGER.warning("Mock fallback is enabled outside development (%s)", config.environment)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[Any, Any]:
        """Application lifespan manager.

        Closes the outbound backend connection pool on shutdown.
        """
        LOGGER.info("Mimariproje gateway is starting, backend at %s", config.backend_url)
        try:
            yield
        finally:
            await backend.aclose()
            LOGGER.info("Mimariproje gateway is shutting down")

    app = FastAPI(
        title="Mimariproje Gateway",
        version="0.1.0",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_router = configure_project_router(APIRouter(), backend, mock_fallback=config.mock_fallback)
    api_router = configure_user_router(api_router, backend, mock_fallback=config.mock_fallback)
    api_router = configure_health_router(api_router, backend, mock_fallback=config.mock_fallback)
    api_router = configure_report_router(api_router)
    app.include_router(api_router, prefix="/api", tags=["proxy"])

    @app.get("/")
    def read_root() -> str:
        return "Mimariproje Gateway"

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    configure_logging(config)
    return configure_fastapi_app(config)
