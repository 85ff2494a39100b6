"""Create/edit form state for the registration console."""

from typing import Optional

from registration_console.models.base import UserId
from registration_console.models.enums import FormMode
from registration_console.models.user import CreateUserInput, User

# Accepted field names, wire spelling and attribute spelling.
FORM_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "first_name": "first_name",
    "last_name": "last_name",
}


class FormController:
    """Owns the form's field values and whether it creates or edits.

    Attributes:
        values: The current field values.
        editing: The user loaded by the edit action, or None in create mode.
    """

    def __init__(self):
        self.values = CreateUserInput()
        self.editing: Optional[User] = None

    @property
    def mode(self) -> FormMode:
        return FormMode.EDIT if self.editing is not None else FormMode.CREATE

    @property
    def editing_id(self) -> Optional[UserId]:
        return self.editing.id if self.editing else None

    def set_field(self, name: str, value: str) -> CreateUserInput:
        """Sets one field, leaving the others untouched.

        Raises:
            ValueError: If ``name`` is not a form field.
        """
        attr = FORM_FIELDS.get(name)
        if attr is None:
            raise ValueError(f"Unknown form field: {name}")
        self.values = self.values.model_copy(update={attr: value or ""})
        return self.values

    def begin_edit(self, user: User) -> None:
        self.editing = user
        self.values = CreateUserInput(
            first_name=user.first_name, last_name=user.last_name
        )

    def reset(self) -> None:
        self.values = CreateUserInput()

    def exit_edit(self) -> None:
        self.editing = None

    def cancel(self) -> None:
        self.reset()
        self.exit_edit()
