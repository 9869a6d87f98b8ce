"""Error boundary around a render callable."""

from __future__ import annotations

import inspect
import logging
import traceback
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from mimariproje.common import generate_id, utc_timestamp
from mimariproje.common.navigation import HOME_ROUTE

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mimariproje.common.navigation import Navigator

    from .reporter import ErrorReporter

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

T = TypeVar("T")


class ErrorBoundary(Generic[T]):
    """Catches exceptions raised while rendering and shows a fallback instead.

    Once an error is caught the boundary keeps returning the fallback until
    :meth:`retry` resets it.

    :param render: Callable producing the rendered output, sync or async
    :param fallback: Output used while in the error state
    :param on_error: Called with the exception and its formatted stack
    :param reporter: Optional telemetry reporter
    :param navigator: Navigator used by :meth:`reload` and :meth:`go_home`
    :param url: Route the boundary renders, reported and reloaded
    """

    def __init__(
        self,
        render: Callable[[], T | Awaitable[T]],
        *,
        fallback: T | None = None,
        on_error: Callable[[BaseException, str], None] | None = None,
        reporter: ErrorReporter | None = None,
        navigator: Navigator | None = None,
        url: str = HOME_ROUTE,
    ) -> None:
        self._render = render
        self.fallback = fallback
        self.on_error = on_error
        self.reporter = reporter
        self.navigator = navigator
        self.url = url

        self.error: BaseException | None = None
        self.error_id = ""
        self.component_stack: str | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    async def render(self) -> T | None:
        """Render the wrapped callable, or the fallback when it raises."""
        if self.has_error:
            return self.fallback

        try:
            result = self._render()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            await self._catch(e)
            return self.fallback
        return result

    async def _catch(self, error: Exception) -> None:
        self.error = error
        self.error_id = generate_id("error")
        self.component_stack = "".join(traceback.format_tb(error.__traceback__))
        LOGGER.error("Error boundary caught %s: %s", self.error_id, error, exc_info=error)

        if self.reporter is not None:
            await self.reporter.report(self._report(), self._log_entry())

        if self.on_error is not None:
            try:
                self.on_error(error, self.component_stack)
            except Exception:
                LOGGER.exception("on_error callback failed for %s", self.error_id)

    def _stack(self) -> str | None:
        if self.error is None:
            return None
        return "".join(traceback.format_exception(self.error))

    def _report(self) -> dict[str, Any]:
        return {
            "errorId": self.error_id,
            "message": str(self.error),
            "stack": self._stack(),
            "componentStack": self.component_stack,
            "timestamp": utc_timestamp(),
            "url": self.url,
        }

    def _log_entry(self) -> dict[str, Any]:
        return {
            "errorId": self.error_id,
            "message": str(self.error),
            "timestamp": utc_timestamp(),
            "url": self.url,
        }

    def retry(self) -> None:
        """Leave the error state so the next render tries again."""
        self.error = None
        self.error_id = ""
        self.component_stack = None

    def reload(self) -> None:
        if self.navigator is not None:
            self.navigator.navigate(self.url)

    def go_home(self) -> None:
        if self.navigator is not None:
            self.navigator.navigate(HOME_ROUTE)

    def error_details(self) -> dict[str, Any]:
        """Details a user can copy into a support request."""
        return {
            "errorId": self.error_id,
            "message": str(self.error) if self.error is not None else None,
            "stack": self._stack(),
            "timestamp": utc_timestamp(),
            "url": self.url,
        }
