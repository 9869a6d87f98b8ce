"""Transient user notifications.

The manager only keeps state; whoever renders toasts subscribes to it and
calls :meth:`ToastManager.expire` on its own clock.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from mimariproje.common import generate_id

if TYPE_CHECKING:
    from collections.abc import Callable

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

DEFAULT_DURATION_MS = 5000


class ToastType(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class ToastAction:
    """Button shown on a toast."""

    label: str
    on_click: Callable[[], None]


@dataclass
class Toast:
    """One notification.

    :param duration: Lifetime in milliseconds; zero or less never expires
    :param persistent: Whether the toast stays until removed explicitly
    :param created_at: Monotonic creation time in seconds
    """

    id: str
    message: str
    type: ToastType
    duration: int = DEFAULT_DURATION_MS
    persistent: bool = False
    action: ToastAction | None = None
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: float) -> bool:
        if self.persistent or self.duration <= 0:
            return False
        return (now - self.created_at) * 1000 >= self.duration


class ToastManager:
    """Ordered collection of visible toasts with change notifications."""

    def __init__(self) -> None:
        self._toasts: list[Toast] = []
        self._listeners: list[Callable[[list[Toast]], None]] = []

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    def subscribe(self, listener: Callable[[list[Toast]], None]) -> Callable[[], None]:
        """Register a listener called with the toast list after each change.

        :param listener: Callable receiving the current toasts
        :return: A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        toasts = self.toasts
        for listener in list(self._listeners):
            try:
                listener(toasts)
            except Exception:
                LOGGER.exception("Toast listener failed")

    def add_toast(
        self,
        message: str,
        type: ToastType | str = ToastType.INFO,  # noqa: A002
        *,
        duration: int = DEFAULT_DURATION_MS,
        persistent: bool = False,
        action: ToastAction | None = None,
    ) -> str:
        """Show a toast.

        :return: The new toast's id
        """
        toast = Toast(
            id=generate_id("toast"),
            message=message,
            type=ToastType(type),
            duration=duration,
            persistent=persistent,
            action=action,
        )
        self._toasts.append(toast)
        self._notify()
        return toast.id

    def remove_toast(self, toast_id: str) -> None:
        remaining = [toast for toast in self._toasts if toast.id != toast_id]
        if len(remaining) != len(self._toasts):
            self._toasts = remaining
            self._notify()

    def clear_all(self) -> None:
        if self._toasts:
            self._toasts = []
            self._notify()

    def expire(self, now: float | None = None) -> list[str]:
        """Drop toasts whose duration has elapsed.

        :param now: Monotonic time in seconds, defaults to the current time
        :return: Ids of the removed toasts
        """
        now = time.monotonic() if now is None else now
        expired = [toast.id for toast in self._toasts if toast.is_expired(now)]
        if expired:
            self._toasts = [toast for toast in self._toasts if toast.id not in expired]
            self._notify()
        return expired

    def show_error(self, message: str, **options: Any) -> str:
        return self.add_toast(message, ToastType.ERROR, **options)

    def show_warning(self, message: str, **options: Any) -> str:
        return self.add_toast(message, ToastType.WARNING, **options)

    def show_success(self, message: str, **options: Any) -> str:
        return self.add_toast(message, ToastType.SUCCESS, **options)

    def show_info(self, message: str, **options: Any) -> str:
        return self.add_toast(message, ToastType.INFO, **options)
