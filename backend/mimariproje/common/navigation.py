"""Navigation hooks used when session changes require a route change."""

from __future__ import annotations

import logging
from typing import Protocol

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

HOME_ROUTE = "/"
LOGIN_ROUTE = "/auth/giris"
EXPIRED_LOGIN_ROUTE = "/auth/giris?expired=true"


class Navigator(Protocol):
    """Anything that can perform a full navigation to a route."""

    def navigate(self, path: str) -> None:
        """Navigate to ``path``."""


class HistoryNavigator:
    """Navigator that records every route it was asked to open."""

    def __init__(self) -> None:
        self.history: list[str] = []

    def navigate(self, path: str) -> None:
        LOGGER.info("Navigating to %s", path)
        self.history.append(path)

    @property
    def current(self) -> str | None:
        """The most recently opened route."""
        return self.history[-1] if self.history else None
