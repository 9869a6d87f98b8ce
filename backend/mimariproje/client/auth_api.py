"""Authentication endpoints of the marketplace backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from mimariproje.common import ApiResponse, UserType

if TYPE_CHECKING:
    from mimariproje.session.tokens import TokenManager

    from .api_client import ApiClient

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class RegisterData(BaseModel):
    """Payload accepted by the registration endpoint."""

    email: str
    password: str
    user_type: UserType = UserType.INDIVIDUAL
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    profession: str | None = None
    phone: str | None = None
    location: str | None = None


class AuthApi:
    """Wraps the ``/auth`` endpoints and keeps the stored tokens current.

    :param client: The API client of the owning session
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @property
    def tokens(self) -> TokenManager:
        return self.client.token_manager

    async def _store_tokens(self, response: ApiResponse) -> None:
        access_token = response.field("access_token")
        refresh_token = response.field("refresh_token")
        if access_token and refresh_token:
            await self.tokens.set_tokens(access_token, refresh_token)
        else:
            LOGGER.warning("Authentication response carried no token pair")

    async def register(self, user_data: RegisterData | dict[str, Any]) -> ApiResponse:
        """Create an account and store the returned tokens.

        :param user_data: Registration payload
        :return: ApiResponse with ``access_token``, ``refresh_token`` and ``user``
        """
        if isinstance(user_data, RegisterData):
            user_data = user_data.model_dump(mode="json", exclude_none=True)
        response = await self.client.post("/auth/register", user_data)
        if response.success and response.data:
            await self._store_tokens(response)
        return response

    async def login(self, email: str, password: str) -> ApiResponse:
        """Log in and store the returned tokens."""
        response = await self.client.post("/auth/login", {"email": email, "password": password})
        if response.success and response.data:
            await self._store_tokens(response)
        return response

    async def logout(self) -> ApiResponse:
        """Revoke the session remotely; local tokens are cleared regardless."""
        try:
            return await self.client.post("/auth/logout")
        finally:
            await self.tokens.clear_tokens()

    async def get_current_user(self) -> ApiResponse:
        """Fetch the user the stored access token belongs to."""
        return await self.client.get("/auth/me")

    async def refresh_token(self) -> ApiResponse:
        """Exchange the stored refresh token for a new pair."""
        refresh_token = await self.tokens.get_refresh_token()
        if not refresh_token:
            return ApiResponse.fail("No refresh token")

        response = await self.client.post("/auth/refresh", {"refresh_token": refresh_token})
        if response.success and response.data:
            await self._store_tokens(response)
        return response

    async def request_password_reset(self, email: str) -> ApiResponse:
        return await self.client.post("/auth/forgot-password", {"email": email})

    async def reset_password(self, token: str, password: str) -> ApiResponse:
        return await self.client.post("/auth/reset-password", {"token": token, "password": password})
