"""Configuration management for the Mimariproje gateway.

This module provides utilities for loading and validating configuration
from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

DEVELOPMENT = "development"
PRODUCTION = "production"
_ENVIRONMENTS = (DEVELOPMENT, PRODUCTION, "test")

_DEFAULT_BACKEND_URL = "http://localhost:5000"
_DEFAULT_PUBLIC_API_URL = "http://localhost:5000/api"
_DEFAULT_ERROR_LOG_LIMIT = 10
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def configure_logging(app_config: AppConfig) -> None:
    """Configure logging based on the application configuration.

    :param app_config: The application configuration instance
    """
    if not app_config.logging_level:
        logging.basicConfig(level=logging.INFO)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level)


@dataclass
class AppConfig:
    """Holds application configuration loaded from environment variables."""

    backend_url: str
    public_api_url: str
    environment: str
    mock_fallback: bool
    backend_timeout: int | None

    storage_path: str
    error_report_url: str
    telemetry_enabled: bool
    error_log_limit: int

    logging_level: str | None
    root_path: str

    def __post_init__(self) -> None:
        """Normalize derived configuration attributes."""
        self.backend_url = self.backend_url.rstrip("/")
        self.public_api_url = self.public_api_url.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Whether the gateway runs in development mode."""
        return self.environment == DEVELOPMENT


def _invalid(var_name: str, value: object) -> ValueError:
    return ValueError(f"Environment variable {var_name} has invalid value: {value}")


def get_env_str(
    var_name: str,
    default: str | None,
    value_checker: Callable[[str], bool] | None = None,
) -> str:
    """Read a string variable, failing when it is missing or rejected.

    :param var_name: Name of the environment variable
    :param default: Value used when unset, None makes the variable required
    :param value_checker: Optional predicate the value must satisfy
    :return: The variable's value
    :raises ValueError: If the variable is required and unset, or rejected
    """
    value = os.getenv(var_name, default)
    if value is None:
        msg = f"Environment variable {var_name} is required"
        raise ValueError(msg)
    if value_checker is not None and not value_checker(value):
        raise _invalid(var_name, value)
    return value


def _parse_int(
    var_name: str,
    value_str: str,
    value_checker: Callable[[int], bool] | None,
) -> int:
    if not value_str.strip().isdigit():
        msg = f"Environment variable {var_name} must be an integer, got: {value_str}"
        raise ValueError(msg)
    value = int(value_str)
    if value_checker is not None and not value_checker(value):
        raise _invalid(var_name, value)
    return value


def get_env_optional_int(
    var_name: str,
    default: int | None,
    value_checker: Callable[[int], bool] | None = None,
) -> int | None:
    """Read an integer variable that may be explicitly disabled.

    Unset means ``default``; an empty string means None.

    :param var_name: Name of the environment variable
    :param default: Value used when unset
    :param value_checker: Optional predicate the parsed value must satisfy
    :return: The parsed integer or None
    :raises ValueError: If the value is not a non-negative integer or is rejected
    """
    value_str = os.getenv(var_name)
    if value_str is None:
        return default
    if value_str == "":
        return None
    return _parse_int(var_name, value_str, value_checker)


def get_env_int(
    var_name: str,
    default: int,
    value_checker: Callable[[int], bool] | None = None,
) -> int:
    """Read an integer variable; unset or empty means ``default``.

    :param var_name: Name of the environment variable
    :param default: Value used when unset or empty
    :param value_checker: Optional predicate the parsed value must satisfy
    :return: The parsed integer
    :raises ValueError: If the value is not a non-negative integer or is rejected
    """
    value_str = os.getenv(var_name)
    if not value_str:
        return default
    return _parse_int(var_name, value_str, value_checker)


def get_env_bool(var_name: str, *, default: bool) -> bool:
    """Get an environment variable as a boolean flag.

    Accepts 1/0, true/false, yes/no and on/off in any case.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set or empty
    :return: The environment variable value as a boolean
    :raises ValueError: If the value is not a recognised boolean
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    lowered = value_str.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False

    msg = f"Environment variable {var_name} must be a boolean, got: {value_str}"
    raise ValueError(msg)


def _is_http_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def load_config_from_env(env_file: str | Path | None) -> AppConfig:
    """Load application configuration from environment variables.

    Mock fallback defaults to on only in development, so an unreachable
    backend is reported as an error everywhere else.

    :param env_file: Optional path to a dotenv file loaded before reading
    :return: An AppConfig instance populated with environment variable values
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    environment = get_env_str(
        "ENVIRONMENT",
        DEVELOPMENT,
        lambda env: env in _ENVIRONMENTS,
    )
    public_api_url = get_env_str(
        "PUBLIC_API_URL",
        _DEFAULT_PUBLIC_API_URL,
        _is_http_url,
    )

    return AppConfig(
        backend_url=get_env_str("BACKEND_URL", _DEFAULT_BACKEND_URL, _is_http_url),
        public_api_url=public_api_url,
        environment=environment,
        mock_fallback=get_env_bool(
            "MOCK_FALLBACK",
            default=environment == DEVELOPMENT,
        ),
        backend_timeout=get_env_optional_int(
            "BACKEND_TIMEOUT",
            None,  # if not set, no timeout
            lambda timeout: timeout > 0,
        ),
        storage_path=get_env_str("STORAGE_PATH", "./mimariproje_storage.db"),
        error_report_url=get_env_str(
            "ERROR_REPORT_URL",
            "/api/error-report",
        ),
        telemetry_enabled=get_env_bool(
            "TELEMETRY_ENABLED",
            default=environment == PRODUCTION,
        ),
        error_log_limit=get_env_int(
            "ERROR_LOG_LIMIT",
            _DEFAULT_ERROR_LOG_LIMIT,
            lambda limit: limit > 0,
        ),
        logging_level=get_env_str(
            "LOGGING_LEVEL",
            "INFO",
            None,
        ),
        root_path=get_env_str(
            "ROOT_PATH",
            "",
        ),
    )
