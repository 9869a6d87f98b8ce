"""Authentication session state machine.

A session starts in ``LOADING`` and settles in ``AUTHENTICATED`` or
``UNAUTHENTICATED``. All transitions go through :meth:`AuthSession._update`,
the single writer, which publishes a snapshot to subscribers after the
change is applied.

**Transitions:**

1. **start**: no stored token settles unauthenticated without any network
   call; a stored token is confirmed against the backend's current-user
   endpoint, and a failed confirmation clears the tokens.
2. **login / register**: loading while the call runs; success settles
   authenticated, failure leaves the previous state.
3. **logout**: best-effort remote call, then tokens and state are cleared
   unconditionally and the home route is opened.
4. **storage events**: another session writing the access token re-runs the
   load; another session removing it clears the state immediately.

Sessions sharing one :class:`LocalStorage` behave like browser tabs: they
agree on authentication state eventually, once the storage event arrives.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from mimariproje.client import ApiClient, AuthApi
from mimariproje.common import ApiResponse, User
from mimariproje.common.navigation import HOME_ROUTE, HistoryNavigator

from .tokens import ACCESS_TOKEN_KEY, TokenManager

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from mimariproje.client import RegisterData
    from mimariproje.config import AppConfig
    from mimariproje.common.navigation import Navigator

    from .storage import LocalStorage, StorageEvent

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

_UNSET: Any = object()


class SessionState(StrEnum):
    """Lifecycle states of an authentication session."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a session published to subscribers."""

    state: SessionState
    user: User | None
    is_loading: bool
    is_authenticated: bool


def _user_from(response: ApiResponse) -> User | None:
    """Return the ``user`` carried by a successful response, if any."""
    if not response.success or not response.data:
        return None
    payload = response.field("user")
    if not isinstance(payload, dict):
        return None
    return User.model_validate(payload)


class AuthSession:
    """Current-user state of one client session.

    :param auth_api: Authentication API bound to this session's token storage
    :param navigator: Used for the full navigation performed by logout
    """

    def __init__(self, auth_api: AuthApi, *, navigator: Navigator | None = None) -> None:
        self.auth_api = auth_api
        self.tokens: TokenManager = auth_api.tokens
        if self.tokens.session_id is None:
            self.tokens.session_id = uuid.uuid4().hex
        self.navigator = navigator or auth_api.client.navigator

        self._user: User | None = None
        self._loading = True
        self._listeners: list[Callable[[SessionSnapshot], None]] = []
        self._unsubscribe_storage: Callable[[], None] | None = None

    @property
    def session_id(self) -> str:
        return self.tokens.session_id

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def state(self) -> SessionState:
        if self._loading:
            return SessionState.LOADING
        if self.is_authenticated:
            return SessionState.AUTHENTICATED
        return SessionState.UNAUTHENTICATED

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            user=self._user,
            is_loading=self._loading,
            is_authenticated=self.is_authenticated,
        )

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Register a listener called with a snapshot after every transition.

        :param listener: Callable receiving SessionSnapshot objects
        :return: A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, *, user: User | None = _UNSET, loading: bool | None = None) -> None:
        if user is not _UNSET:
            self._user = user
        if loading is not None:
            self._loading = loading

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                LOGGER.exception("Session listener failed in session %s", self.session_id)

    async def start(self) -> None:
        """Subscribe to storage events and load the current user."""
        if self._unsubscribe_storage is None:
            self._unsubscribe_storage = self.tokens.storage.subscribe(
                self.session_id,
                self._on_storage_event,
            )
        await self.load_user()

    async def close(self) -> None:
        """Stop reacting to storage events and release the HTTP client."""
        if self._unsubscribe_storage is not None:
            self._unsubscribe_storage()
            self._unsubscribe_storage = None
        await self.auth_api.client.aclose()

    async def __aenter__(self) -> AuthSession:
        await self.start()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def load_user(self) -> None:
        """Resolve the session from the stored token.

        Failures never surface: any error leaves the session unauthenticated
        with its tokens cleared.
        """
        try:
            if not await self.tokens.is_authenticated():
                self._update(user=None, loading=False)
                return

            expiry = await self.tokens.access_token_expiry()
            if expiry is not None and expiry <= datetime.now(UTC):
                LOGGER.info("Stored access token expired at %s, confirming with backend", expiry)

            response = await self.auth_api.get_current_user()
            user = _user_from(response)
            if user is not None:
                self._update(user=user, loading=False)
                return

            LOGGER.info("Stored token rejected: %s", response.error)
            await self.tokens.clear_tokens()
            self._update(user=None, loading=False)
        except Exception as e:
            LOGGER.error("Load user error: %s", e)
            await self.tokens.clear_tokens()
            self._update(user=None, loading=False)

    async def login(self, email: str, password: str) -> ApiResponse:
        """Log in with email and password.

        :param email: Account email
        :param password: Account password
        :return: ApiResponse; connection problems yield a generic error
        """
        self._update(loading=True)
        try:
            response = await self.auth_api.login(email, password)
            if response.success and response.data:
                await self._settle_authenticated(response)
                return ApiResponse.ok(response.data, message="Giriş başarılı")
            return ApiResponse.fail(response.error or "Giriş başarısız")
        except Exception as e:
            LOGGER.error("Login error: %s", e)
            return ApiResponse.fail("Bağlantı hatası")
        finally:
            self._update(loading=False)

    async def register(self, user_data: RegisterData | dict[str, Any]) -> ApiResponse:
        """Create an account and start an authenticated session.

        :param user_data: Registration payload
        :return: ApiResponse; connection problems yield a generic error
        """
        self._update(loading=True)
        try:
            response = await self.auth_api.register(user_data)
            if response.success and response.data:
                await self._settle_authenticated(response)
                return ApiResponse.ok(response.data, message=response.message or "Kayıt başarılı")
            return ApiResponse.fail(response.error or "Kayıt başarısız")
        except Exception as e:
            LOGGER.error("Register error: %s", e)
            return ApiResponse.fail("Bağlantı hatası")
        finally:
            self._update(loading=False)

    async def _settle_authenticated(self, response: ApiResponse) -> None:
        user = _user_from(response)
        if user is not None:
            self._update(user=user)
            return
        # token pair without a user record: ask the backend who we are
        await self.load_user()

    async def logout(self) -> None:
        """End the session locally whatever the backend answers."""
        try:
            await self.auth_api.logout()
        except Exception as e:
            LOGGER.error("Logout error: %s", e)
        finally:
            await self.tokens.clear_tokens()
            self._update(user=None, loading=False)
            self.navigator.navigate(HOME_ROUTE)

    async def refresh_user(self) -> None:
        """Re-fetch the current user in the background; errors are only logged."""
        if not self.is_authenticated:
            return

        try:
            response = await self.auth_api.get_current_user()
            user = _user_from(response)
            if user is not None:
                self._update(user=user)
        except Exception as e:
            LOGGER.error("Refresh user error: %s", e)

    def update_user(self, **fields: Any) -> None:
        """Overlay fields on the cached user; does nothing when logged out."""
        if self._user is not None:
            self._update(user=self._user.merged(**fields))

    async def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key is None:
            self._update(user=None)
            return
        if event.key != ACCESS_TOKEN_KEY:
            return

        if event.new_value:
            LOGGER.debug("Session %s saw a new access token, reloading user", self.session_id)
            await self.load_user()
        else:
            LOGGER.debug("Session %s saw the access token removed", self.session_id)
            self._update(user=None)


def open_session(
    storage: LocalStorage,
    api_base_url: str,
    *,
    navigator: Navigator | None = None,
    session_id: str | None = None,
    http_client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> AuthSession:
    """Wire a session with its token manager, API client and auth API.

    :param storage: Storage area shared with other sessions
    :param api_base_url: Public API base URL of the backend
    :param navigator: Navigator for login and logout redirects
    :param session_id: Identifier of the session, generated when omitted
    :param http_client: Optional pre-configured httpx client
    :param timeout: Request timeout in seconds, None for no timeout
    :return: A session that still needs :meth:`AuthSession.start`
    """
    navigator = navigator or HistoryNavigator()
    tokens = TokenManager(storage, session_id or uuid.uuid4().hex)
    client = ApiClient(
        api_base_url,
        tokens,
        navigator=navigator,
        http_client=http_client,
        timeout=timeout,
    )
    return AuthSession(AuthApi(client), navigator=navigator)


def open_session_from_config(
    config: AppConfig,
    storage: LocalStorage,
    *,
    navigator: Navigator | None = None,
    session_id: str | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AuthSession:
    """Wire a session against the configured public API and timeout.

    :param config: Application configuration
    :param storage: Storage area shared with other sessions
    :param navigator: Navigator for login and logout redirects
    :param session_id: Identifier of the session, generated when omitted
    :param http_client: Optional pre-configured httpx client
    :return: A session that still needs :meth:`AuthSession.start`
    """
    return open_session(
        storage,
        config.public_api_url,
        navigator=navigator,
        session_id=session_id,
        http_client=http_client,
        timeout=config.backend_timeout,
    )
