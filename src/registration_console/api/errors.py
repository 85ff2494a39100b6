"""Exceptions raised by users API implementations."""

from typing import Optional


class UsersApiError(Exception):
    """Base class for failures reported by a users API backend.

    Attributes:
        message: Human-readable description of the failure.
        status_code: HTTP status used when the error crosses the REST surface.
    """

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UserNotFoundError(UsersApiError):
    """The referenced user does not exist."""

    status_code = 404

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class UserValidationError(UsersApiError):
    """The backend rejected the submitted fields."""

    status_code = 422


class BackendUnavailableError(UsersApiError):
    """The backend could not be reached."""

    status_code = 503
