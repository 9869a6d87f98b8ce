"""Classification of errors into user-facing error records.

:func:`classify_error` turns anything raised or returned by a call into an
:class:`ErrorInfo`. :class:`ErrorHandler` additionally applies the session
side effects of certain statuses and forwards the record to telemetry.
"""

from __future__ import annotations

import logging
import traceback
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, Field

from mimariproje.common import generate_id, utc_timestamp
from mimariproje.common.navigation import EXPIRED_LOGIN_ROUTE, HOME_ROUTE

if TYPE_CHECKING:
    from mimariproje.common import ApiResponse
    from mimariproje.common.navigation import Navigator
    from mimariproje.session.tokens import TokenManager

    from .reporter import ErrorReporter

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

UNEXPECTED_ERROR = "Beklenmeyen bir hata oluştu"
UNKNOWN_ERROR = "Bilinmeyen hata"
NOT_FOUND_ROUTE = "/404"
MAINTENANCE_ROUTE = "/maintenance"

_RECOVERABLE_PATTERNS = ("network", "timeout", "connection", "fetch", "validation")


class ErrorType(StrEnum):
    API = "api"
    VALIDATION = "validation"
    NETWORK = "network"
    AUTH = "auth"
    UNKNOWN = "unknown"


class ErrorInfo(BaseModel):
    """A classified error as shown to the user."""

    id: str = Field(default_factory=lambda: generate_id("err"))
    message: str
    type: ErrorType = ErrorType.UNKNOWN
    status_code: int | None = None
    timestamp: str = Field(default_factory=utc_timestamp)
    context: str | None = None
    recoverable: bool = True


def _error_type(message: str) -> ErrorType:
    lowered = message.lower()
    if "network" in lowered or "fetch" in lowered:
        return ErrorType.NETWORK
    if "validation" in lowered or "invalid" in lowered:
        return ErrorType.VALIDATION
    if "unauthorized" in lowered or "forbidden" in lowered:
        return ErrorType.AUTH
    return ErrorType.UNKNOWN


def _is_recoverable(message: str) -> bool:
    lowered = message.lower()
    return any(pattern in lowered for pattern in _RECOVERABLE_PATTERNS)


def _status_error_message(error: httpx.HTTPStatusError) -> str:
    try:
        body = error.response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(error) or UNKNOWN_ERROR


def classify_error(error: Any, context: str | None = None) -> ErrorInfo:
    """Build an ErrorInfo for anything that went wrong.

    :param error: An exception, a message string or any other value
    :param context: Optional description of where the error happened
    :return: The classified error
    """
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        return ErrorInfo(
            message=_status_error_message(error),
            type=ErrorType.API,
            status_code=status_code,
            context=context,
            recoverable=status_code < httpx.codes.INTERNAL_SERVER_ERROR,
        )
    if isinstance(error, BaseException):
        message = str(error)
        return ErrorInfo(
            message=message,
            type=_error_type(message),
            context=context,
            recoverable=_is_recoverable(message),
        )
    if isinstance(error, str):
        return ErrorInfo(message=error, context=context)
    return ErrorInfo(message=UNEXPECTED_ERROR, context=context)


def classify_api_response(response: ApiResponse, context: str | None = None) -> ErrorInfo | None:
    """Classify an unsuccessful ApiResponse, None for a successful one."""
    if response.success or not response.error:
        return None
    return classify_error(Exception(response.error), context)


class ErrorHandler:
    """Central error handling for a client session.

    :param navigator: Navigator used for status-driven redirects
    :param tokens: Token manager cleared when a 401 is handled
    :param reporter: Optional telemetry reporter
    """

    def __init__(
        self,
        navigator: Navigator,
        *,
        tokens: TokenManager | None = None,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self.navigator = navigator
        self.tokens = tokens
        self.reporter = reporter
        self.current_error: ErrorInfo | None = None

    @property
    def is_error(self) -> bool:
        return self.current_error is not None

    def clear_error(self) -> None:
        self.current_error = None

    async def handle_error(self, error: Any, context: str | None = None) -> ErrorInfo:
        """Classify, apply side effects, remember and report an error."""
        info = classify_error(error, context)
        await self._apply_side_effects(info)
        self.current_error = info
        LOGGER.error("%s error %s: %s", info.type.upper(), info.id, info.message)

        if self.reporter is not None:
            report = {"errorId": info.id, **info.model_dump(mode="json")}
            if isinstance(error, BaseException) and error.__traceback__ is not None:
                report["stack"] = "".join(traceback.format_exception(error))
            await self.reporter.report(report, info.model_dump(mode="json"))
        return info

    async def handle_api_response(
        self,
        response: ApiResponse,
        context: str | None = None,
    ) -> ErrorInfo | None:
        """Handle an unsuccessful ApiResponse; successful ones are ignored."""
        if response.success or not response.error:
            return None
        return await self.handle_error(Exception(response.error), context)

    def show_error(self, message: str, error_type: ErrorType = ErrorType.UNKNOWN) -> ErrorInfo:
        """Record an error raised by the caller itself, without side effects."""
        info = ErrorInfo(message=message, type=error_type)
        self.current_error = info
        return info

    async def _apply_side_effects(self, info: ErrorInfo) -> None:
        context = info.context or ""
        match info.status_code:
            case httpx.codes.UNAUTHORIZED:
                if self.tokens is not None:
                    await self.tokens.clear_tokens()
                self.navigator.navigate(EXPIRED_LOGIN_ROUTE)
            case httpx.codes.FORBIDDEN:
                self.navigator.navigate(HOME_ROUTE)
            case httpx.codes.NOT_FOUND if "page" in context:
                self.navigator.navigate(NOT_FOUND_ROUTE)
            case 500 | 502 | 503 if "critical" in context:
                self.navigator.navigate(MAINTENANCE_ROUTE)
            case _:
                pass
