"""In-memory implementation of the UsersApi.

This module provides a thread-safe, ephemeral users backend suitable for
testing and local development.
"""

import threading
import uuid

from registration_console.api.base import UsersApi, matches_term
from registration_console.api.errors import UserNotFoundError
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryUsersApi(UsersApi):
    """In-memory implementation of the UsersApi.

    Useful for unit tests and local development where persistence across
    restarts is not required. Users are kept in registration order.
    """

    def __init__(self, users: list[User] | None = None):
        """Initializes the store, optionally seeded with existing users."""
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()
        for user in users or []:
            self._users[user.id] = user

    def get_users(self) -> list[User]:
        with self._lock:
            return [u.model_copy() for u in self._users.values()]

    def search_user(self, term: str) -> list[User]:
        with self._lock:
            return [
                u.model_copy()
                for u in self._users.values()
                if matches_term(u, term)
            ]

    def create_user(self, data: CreateUserInput) -> User:
        user = User(
            id=str(uuid.uuid4()),
            first_name=data.first_name,
            last_name=data.last_name,
        )
        with self._lock:
            self._users[user.id] = user
        logger.info(
            "User created",
            extra={"extra_fields": {"event": "user_created", "user_id": user.id}},
        )
        return user.model_copy()

    def update_user(self, user_id: str, patch: UserPatch) -> User:
        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                raise UserNotFoundError(user_id)
            updated = current.model_copy(update=patch.changes())
            self._users[user_id] = updated
        logger.info(
            "User updated",
            extra={"extra_fields": {"event": "user_updated", "user_id": user_id}},
        )
        return updated.model_copy()

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            if user_id not in self._users:
                raise UserNotFoundError(user_id)
            del self._users[user_id]
        logger.info(
            "User deleted",
            extra={"extra_fields": {"event": "user_deleted", "user_id": user_id}},
        )
