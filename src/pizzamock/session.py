"""Single active session held by a simulator instance."""

from __future__ import annotations

import secrets
from collections.abc import Callable

from pizzamock.exceptions import ConfigurationError, ConflictError, UnauthorizedError
from pizzamock.fixtures import ResourceFixtures, User
from pizzamock.logging import get_logger

LOG = get_logger(__name__)

TokenFactory = Callable[[], str]


def make_token_factory(strategy: str = "fixed", fixed_token: str = "abcdef") -> TokenFactory:
    """Return a callable that issues bearer tokens.

    Args:
        strategy: ``"fixed"`` returns *fixed_token* on every login; ``"random"``
            issues a fresh hex token each time.
        fixed_token: Token used by the fixed strategy.

    Raises:
        ConfigurationError: If *strategy* is not recognised.
    """
    if strategy == "fixed":
        return lambda: fixed_token
    if strategy == "random":
        return lambda: secrets.token_hex(16)
    raise ConfigurationError(f"Unsupported token strategy: {strategy}")


class SessionState:
    """At most one authenticated identity and the token issued to it.

    Last login wins: a successful login or registration replaces whatever
    session was active. A token is valid only while it equals
    ``current_token``.
    """

    def __init__(self, fixtures: ResourceFixtures, token_factory: TokenFactory | None = None) -> None:
        self._fixtures = fixtures
        self._issue_token = token_factory or make_token_factory()
        self.current_user: User | None = None
        self.current_token: str | None = None

    @property
    def active(self) -> bool:
        return self.current_user is not None

    def _start(self, user: User) -> tuple[User, str]:
        self.current_user = user
        self.current_token = self._issue_token()
        return user, self.current_token

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Authenticate against the fixture user set.

        Raises:
            UnauthorizedError: Unknown email or wrong password.
        """
        user = self._fixtures.find_user(email)
        if user is None or user.password != password:
            LOG.info("session_login_rejected", email=email)
            raise UnauthorizedError()
        LOG.info("session_login", email=email, user_id=user.id)
        return self._start(user)

    def register(self, name: str, email: str, password: str) -> tuple[User, str]:
        """Create a diner account and log it in.

        Raises:
            ConflictError: The email is already registered.
        """
        if self._fixtures.find_user(email) is not None:
            LOG.info("session_register_conflict", email=email)
            raise ConflictError()
        user = self._fixtures.add_user(name, email, password)
        LOG.info("session_registered", email=email, user_id=user.id)
        return self._start(user)

    def authorize(self, presented_token: str | None) -> bool:
        """Return True if *presented_token* is the current session's token."""
        return (
            self.current_token is not None
            and presented_token is not None
            and secrets.compare_digest(presented_token, self.current_token)
        )

    def require(self, presented_token: str | None) -> User | None:
        """Check *presented_token* and return the session user.

        Raises:
            UnauthorizedError: Token missing or not the current one.
        """
        if not self.authorize(presented_token):
            LOG.info("session_token_rejected", has_token=presented_token is not None)
            raise UnauthorizedError()
        return self.current_user

    def logout(self, presented_token: str | None) -> None:
        """End the session. A stale token leaves the session untouched.

        Raises:
            UnauthorizedError: Token missing or not the current one.
        """
        self.require(presented_token)
        LOG.info("session_logout", user_id=self.current_user.id if self.current_user else None)
        self.clear()

    def clear(self) -> None:
        self.current_user = None
        self.current_token = None
