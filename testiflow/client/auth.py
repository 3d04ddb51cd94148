"""Authentication flow: login, signup, logout and current-user refresh."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from pydantic import ValidationError

from .api import ApiClient
from .errors import UNEXPECTED_RESPONSE_MESSAGE, ApiError, MissingAccessTokenError
from .models import LoginResponse, User
from .session import SessionStore


DASHBOARD_ROUTE = "/dashboard"
LOGIN_ROUTE = "/auth/login"
SIGNUP_SUCCESS_ROUTE = "/auth/login?signup=success"

logger = logging.getLogger(__name__)


class AuthState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def _decode_user(payload: object) -> User:
    try:
        return User.model_validate(payload)
    except ValidationError as exc:
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, 500, {"originalError": exc.errors()}) from exc


class AuthController:
    """Owns the authenticated user and drives the session store.

    ``navigate`` receives the route the caller should move to after login,
    signup and logout.
    """

    def __init__(
        self,
        client: ApiClient,
        session: SessionStore,
        navigate: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.session = session
        self._navigate = navigate
        self.state = AuthState.ANONYMOUS
        self.user: User | None = None
        self.last_error: str | None = None
        self._initialized = False

    @property
    def token(self) -> str | None:
        return self.session.get()

    @property
    def is_loading(self) -> bool:
        return self.state is AuthState.AUTHENTICATING

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    async def initialize(self) -> None:
        """Restore a stored session once per controller."""
        if self._initialized:
            return
        self._initialized = True

        if self.session.get() is None:
            return
        try:
            user = _decode_user(await self.client.get_current_user())
        except ApiError as exc:
            logger.info("Stored session rejected (%s); clearing token", exc.status)
            self.session.clear()
            self.user = None
            self.state = AuthState.ANONYMOUS
            return
        self.user = user
        self.state = AuthState.AUTHENTICATED

    async def login(self, email: str, password: str) -> User:
        self.state = AuthState.AUTHENTICATING
        self.last_error = None
        try:
            payload = await self.client.login(email, password)
            try:
                response = LoginResponse.model_validate(payload)
            except ValidationError as exc:
                raise MissingAccessTokenError(payload) from exc
            if not response.access_token:
                raise MissingAccessTokenError(payload)

            self.session.set(response.access_token)
            user = _decode_user(await self.client.get_current_user())
        except ApiError as exc:
            logger.warning("Login failed for %s: %s", email, exc.message)
            # Anonymous never keeps a token, including one from an earlier login.
            self.session.clear()
            self.user = None
            self.last_error = exc.message or "Login failed"
            self.state = AuthState.ANONYMOUS
            raise

        self.user = user
        self.state = AuthState.AUTHENTICATED
        logger.info("Logged in as %s", user.email)
        self._go(DASHBOARD_ROUTE)
        return user

    async def signup(self, name: str, email: str, password: str) -> None:
        previous_state = self.state
        self.state = AuthState.AUTHENTICATING
        self.last_error = None
        try:
            await self.client.signup(name, email, password)
        except ApiError as exc:
            logger.warning("Signup failed for %s: %s", email, exc.message)
            self.last_error = exc.message or "Signup failed"
            raise
        finally:
            self.state = previous_state
        logger.info("Account created for %s", email)
        self._go(SIGNUP_SUCCESS_ROUTE)

    def logout(self) -> None:
        self.session.clear()
        self.user = None
        self.state = AuthState.ANONYMOUS
        self._go(LOGIN_ROUTE)

    async def refresh_user(self) -> None:
        if self.session.get() is None:
            return
        try:
            user = _decode_user(await self.client.get_current_user())
        except ApiError as exc:
            logger.warning("Failed to refresh user: %s", exc.message)
            if exc.is_auth_rejection:
                self.logout()
            else:
                self.last_error = exc.message
            return
        self.user = user
        self.state = AuthState.AUTHENTICATED

    def _go(self, route: str) -> None:
        if self._navigate is not None:
            self._navigate(route)
