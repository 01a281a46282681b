"""
User directory and session.

The dashboard has no real authentication: a fixed directory of four users
and a "current user" that login returns and profile edits change. The
current user lives on an explicit ``Session`` object that callers create,
pass around and ``reset()``; there is no module-level current user.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from patientflow.core.errors import InvalidCredentialsError
from patientflow.runtime.logging import get_session_logger, log_event

logger = get_session_logger()

TOKEN_EXPIRES_IN = 3600

DEFAULT_USERS: tuple[dict[str, Any], ...] = (
    {
        "id": "user-1",
        "email": "admin@patientflow.com",
        "name": "Dr. Admin User",
        "role": "admin",
        "department": "Care Coordination",
    },
    {
        "id": "user-2",
        "email": "sarah.wilson@email.com",
        "name": "Dr. Sarah Wilson",
        "role": "physician",
        "department": "Primary Care",
    },
    {
        "id": "user-3",
        "email": "nurse.coordinator@email.com",
        "name": "Jane Coordinator",
        "role": "nurse",
        "department": "Care Coordination",
    },
    {
        "id": "user-4",
        "email": "billing.admin@email.com",
        "name": "Bill Admin",
        "role": "billing",
        "department": "Billing",
    },
)

DEFAULT_CURRENT_USER: dict[str, Any] = {
    **DEFAULT_USERS[0],
    "permissions": ["read", "write", "admin"],
}


class LoginResult(BaseModel):
    """Result of a successful login."""

    user: dict[str, Any]
    token: str
    expires_in: int = Field(default=TOKEN_EXPIRES_IN, serialization_alias="expiresIn")


class LogoutResult(BaseModel):
    """Result of a logout."""

    success: bool = True
    message: str = "Logged out successfully"


class UserDirectory:
    """Static list of dashboard users (used for assignee pickers)."""

    def __init__(self, users: Iterable[Mapping[str, Any]] = DEFAULT_USERS):
        self._users = [dict(user) for user in users]

    def list(self) -> list[dict[str, Any]]:
        """Return copies of all users in directory order."""
        return [dict(user) for user in self._users]

    def find_by_id(self, user_id: str) -> dict[str, Any] | None:
        for user in self._users:
            if user.get("id") == user_id:
                return dict(user)
        return None


class Session:
    """
    Holds the current user for one dashboard session.

    Args:
        current_user: Initial user; defaults to the admin fixture
        directory: User directory; defaults to the four fixture users
        clock: Source of the current time, used for login tokens
    """

    def __init__(
        self,
        current_user: Mapping[str, Any] | None = None,
        directory: UserDirectory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._initial_user = copy.deepcopy(dict(current_user or DEFAULT_CURRENT_USER))
        self._current_user = copy.deepcopy(self._initial_user)
        self.directory = directory or UserDirectory()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get_current_user(self) -> dict[str, Any]:
        return copy.deepcopy(self._current_user)

    def list_users(self) -> list[dict[str, Any]]:
        return self.directory.list()

    def login(self, credentials: Mapping[str, Any]) -> LoginResult:
        """
        Simulate a login.

        Any non-empty email/password pair is accepted and the current user is
        returned with a mock token.

        Raises:
            InvalidCredentialsError: If email or password is missing or empty
        """
        if not credentials.get("email") or not credentials.get("password"):
            log_event(
                logger,
                logging.WARNING,
                "Login rejected: missing email or password",
                entity="User",
                operation="login",
            )
            raise InvalidCredentialsError()

        millis = int(self._clock().timestamp() * 1000)
        log_event(
            logger,
            logging.INFO,
            f"Login for {credentials['email']}",
            entity="User",
            operation="login",
            record_id=self._current_user.get("id"),
        )
        return LoginResult(
            user=self.get_current_user(),
            token=f"mock-token-{millis}",
            expires_in=TOKEN_EXPIRES_IN,
        )

    def logout(self) -> LogoutResult:
        """Simulate a logout. The current user is left in place."""
        return LogoutResult()

    def update_profile(self, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``updates`` into the current user and return the result."""
        self._current_user = {**self._current_user, **copy.deepcopy(dict(updates))}
        return self.get_current_user()

    def reset(self) -> None:
        """Restore the user the session started with."""
        self._current_user = copy.deepcopy(self._initial_user)
