"""Client session lifecycle: token storage and auth state."""

from .auth_session import (
    AuthSession,
    SessionSnapshot,
    SessionState,
    open_session,
    open_session_from_config,
)
from .storage import LocalStorage, StorageEvent
from .storage_exceptions import StorageClosedError, StorageError
from .tokens import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TokenManager, read_token_expiry

__all__ = [
    "ACCESS_TOKEN_KEY",
    "REFRESH_TOKEN_KEY",
    "AuthSession",
    "LocalStorage",
    "SessionSnapshot",
    "SessionState",
    "StorageClosedError",
    "StorageError",
    "StorageEvent",
    "TokenManager",
    "open_session",
    "open_session_from_config",
    "read_token_expiry",
]
