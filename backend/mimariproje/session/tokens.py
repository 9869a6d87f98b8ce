"""Access and refresh token persistence.

Token presence is the only authentication signal the client trusts on its
own; validity is confirmed by the backend. Expiry can be inspected for
information but never changes :meth:`TokenManager.is_authenticated`.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import jwt

if TYPE_CHECKING:
    from .storage import LocalStorage

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

ACCESS_TOKEN_KEY = "mimariproje_access_token"
REFRESH_TOKEN_KEY = "mimariproje_refresh_token"


def read_token_expiry(token: str | None) -> datetime | None:
    """Read the ``exp`` claim of a JWT without verifying its signature.

    :param token: The token string, possibly not a JWT at all
    :return: The expiry as an aware UTC datetime, or None if unavailable
    """
    if not token:
        return None
    try:
        claims = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return None

    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return None
    return datetime.fromtimestamp(exp, tz=UTC)


class TokenManager:
    """Reads and writes the session token pair in a shared storage area.

    :param storage: The storage area holding the tokens
    :param session_id: Identifier of the owning session, attached to writes
    """

    def __init__(self, storage: LocalStorage, session_id: str | None = None) -> None:
        self.storage = storage
        self.session_id = session_id

    async def get_access_token(self) -> str | None:
        """Return the stored access token, if any."""
        return await self.storage.get_item(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> str | None:
        """Return the stored refresh token, if any."""
        return await self.storage.get_item(REFRESH_TOKEN_KEY)

    async def set_tokens(self, access_token: str, refresh_token: str) -> None:
        """Replace the stored token pair.

        The refresh token is written first so that sessions reacting to the
        access-token event always see a complete pair.

        :param access_token: The new access token
        :param refresh_token: The new refresh token
        """
        await self.storage.set_item(REFRESH_TOKEN_KEY, refresh_token, source=self.session_id)
        await self.storage.set_item(ACCESS_TOKEN_KEY, access_token, source=self.session_id)
        LOGGER.debug("Stored new token pair for session %s", self.session_id)

    async def clear_tokens(self) -> None:
        """Remove both tokens from the storage."""
        await self.storage.remove_item(ACCESS_TOKEN_KEY, source=self.session_id)
        await self.storage.remove_item(REFRESH_TOKEN_KEY, source=self.session_id)
        LOGGER.debug("Cleared tokens for session %s", self.session_id)

    async def is_authenticated(self) -> bool:
        """Return True when a non-empty access token is stored."""
        return bool(await self.get_access_token())

    async def access_token_expiry(self) -> datetime | None:
        """Return the access token expiry when the token is a JWT carrying one."""
        return read_token_expiry(await self.get_access_token())
