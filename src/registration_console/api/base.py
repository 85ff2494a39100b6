"""Users API interface.

This module defines the abstract contract the console consumes for reading
and writing user records. Implementations live in the persistence package
(in-memory, SQL) and in ``registration_console.api.http_client``.
"""

from abc import ABC, abstractmethod

from registration_console.models.user import CreateUserInput, User, UserPatch


class UsersApi(ABC):
    """Abstract interface for the user registration backend.

    Every method may raise ``UsersApiError``; the console treats any raised
    exception as a failed request.
    """

    @abstractmethod
    def get_users(self) -> list[User]:
        """Lists every registered user.

        Returns:
            The users, in registration order.
        """
        pass  # pragma: no cover

    @abstractmethod
    def search_user(self, term: str) -> list[User]:
        """Finds users whose name matches a search term.

        Args:
            term: Case-insensitive text matched against first, last and full
                name. An empty term matches every user.

        Returns:
            The matching users, in registration order.
        """
        pass  # pragma: no cover

    @abstractmethod
    def create_user(self, data: CreateUserInput) -> User:
        """Registers a new user.

        Args:
            data: The names to register.

        Returns:
            The created user with its server-assigned identifier.
        """
        pass  # pragma: no cover

    @abstractmethod
    def update_user(self, user_id: str, patch: UserPatch) -> User:
        """Applies a partial update to an existing user.

        Args:
            user_id: The identifier of the user to update.
            patch: The fields to change.

        Returns:
            The updated user.

        Raises:
            UserNotFoundError: If no user has the given identifier.
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Removes a user.

        Args:
            user_id: The identifier of the user to delete.

        Raises:
            UserNotFoundError: If no user has the given identifier.
        """
        pass  # pragma: no cover


def normalize_term(term: str) -> str:
    return (term or "").strip().lower()


def matches_term(user: User, term: str) -> bool:
    """Returns True if the user's name contains the normalized search term."""
    needle = normalize_term(term)
    if not needle:
        return True
    return any(
        needle in value.lower()
        for value in (user.first_name, user.last_name, user.full_name)
    )
