import pytest
from pydantic import ValidationError

from registration_console.models.user import (
    CreateUserInput,
    User,
    UserPatch,
    UserUpdate,
)


class TestUserModels:
    def test_user_accepts_wire_and_attribute_names(self):
        wire = User.model_validate(
            {"id": "abc", "firstName": "Ada", "lastName": "Lovelace"}
        )
        attrs = User(id="abc", first_name="Ada", last_name="Lovelace")
        assert wire == attrs
        assert wire.full_name == "Ada Lovelace"

    def test_user_dumps_camel_case(self):
        user = User(id="abc", first_name="Ada", last_name="Lovelace")
        assert user.model_dump(by_alias=True) == {
            "id": "abc",
            "firstName": "Ada",
            "lastName": "Lovelace",
        }

    def test_user_requires_id(self):
        with pytest.raises(ValidationError):
            User(id="", first_name="Ada", last_name="Lovelace")
        with pytest.raises(ValidationError):
            User(first_name="Ada", last_name="Lovelace")

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            CreateUserInput(first_name="Ada", last_name="L", email="x@y.z")

    def test_short_id(self):
        user = User(
            id="0123456789abcdef", first_name="Ada", last_name="Lovelace"
        )
        assert user.short_id == "01234567"

    def test_create_input_defaults_empty(self):
        data = CreateUserInput()
        assert data.first_name == ""
        assert data.last_name == ""
        assert data.is_empty()
        assert not CreateUserInput(first_name="A").is_empty()

    def test_patch_changes_skip_unset(self):
        assert UserPatch().changes() == {}
        assert UserPatch(last_name="Byron").changes() == {"last_name": "Byron"}

    def test_patch_from_form_keeps_empty_strings(self):
        patch = UserPatch.from_form(CreateUserInput(first_name="Ada"))
        assert patch.changes() == {"first_name": "Ada", "last_name": ""}

    def test_user_update_requires_id(self):
        with pytest.raises(ValidationError):
            UserUpdate(id="", patch=UserPatch())
