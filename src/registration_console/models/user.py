"""Data models for user registration records.

The wire representation uses camelCase field names (``firstName``,
``lastName``); the Python attributes are snake_case. Both spellings are
accepted when validating input.
"""

from typing import Any, Optional

from pydantic import Field

from registration_console.models.base import ModelBase, UserId


class User(ModelBase):
    """A registered user as returned by the users API.

    Attributes:
        id: Server-assigned opaque identifier.
        first_name: The user's first name.
        last_name: The user's last name.
    """

    id: UserId = Field(
        ..., min_length=1, description="Server-assigned opaque identifier."
    )
    first_name: str = Field(
        ..., alias="firstName", description="The user's first name."
    )
    last_name: str = Field(
        ..., alias="lastName", description="The user's last name."
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def short_id(self) -> str:
        """The identifier prefix shown in the users table."""
        return self.id[:8]


class CreateUserInput(ModelBase):
    """Input for registering a new user. Also used as the form state."""

    first_name: str = Field(
        default="", alias="firstName", description="First name to register."
    )
    last_name: str = Field(
        default="", alias="lastName", description="Last name to register."
    )

    def is_empty(self) -> bool:
        return not self.first_name and not self.last_name


class UserPatch(ModelBase):
    """Partial set of user fields applied by an update.

    Fields left as ``None`` are not changed by the backend.
    """

    first_name: Optional[str] = Field(
        default=None, alias="firstName", description="New first name."
    )
    last_name: Optional[str] = Field(
        default=None, alias="lastName", description="New last name."
    )

    @classmethod
    def from_form(cls, form: CreateUserInput) -> "UserPatch":
        return cls(first_name=form.first_name, last_name=form.last_name)

    def changes(self) -> dict[str, Any]:
        """Returns the attribute names and values this patch sets."""
        return self.model_dump(exclude_none=True)


class UserUpdate(ModelBase):
    """Variables for the update mutation: a target id and its patch."""

    id: UserId = Field(..., min_length=1)
    patch: UserPatch = Field(default_factory=UserPatch)
