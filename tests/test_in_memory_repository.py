import pytest

from registration_console.api.errors import UserNotFoundError
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.persistence.in_memory import InMemoryUsersApi


class TestInMemoryUsersApi:
    @pytest.fixture
    def api(self):
        api = InMemoryUsersApi()
        api.create_user(CreateUserInput(first_name="Ada", last_name="Lovelace"))
        api.create_user(CreateUserInput(first_name="Jane", last_name="Austen"))
        api.create_user(CreateUserInput(first_name="Alan", last_name="Turing"))
        return api

    def test_create_assigns_unique_ids(self, api):
        users = api.get_users()
        assert len(users) == 3
        assert len({u.id for u in users}) == 3
        assert all(u.id for u in users)

    def test_list_keeps_registration_order(self, api):
        names = [u.first_name for u in api.get_users()]
        assert names == ["Ada", "Jane", "Alan"]

    def test_search_is_case_insensitive_substring(self, api):
        assert [u.first_name for u in api.search_user("jane")] == ["Jane"]
        assert [u.first_name for u in api.search_user("TUR")] == ["Alan"]
        assert [u.first_name for u in api.search_user("a")] == [
            "Ada",
            "Jane",
            "Alan",
        ]

    def test_search_matches_full_name(self, api):
        assert [u.last_name for u in api.search_user("ada love")] == [
            "Lovelace"
        ]

    def test_search_empty_term_returns_everything(self, api):
        assert api.search_user("") == api.get_users()
        assert api.search_user("   ") == api.get_users()

    def test_update_is_partial(self, api):
        ada = api.search_user("Ada")[0]
        updated = api.update_user(ada.id, UserPatch(last_name="King"))
        assert updated.first_name == "Ada"
        assert updated.last_name == "King"
        assert api.search_user("King")[0].id == ada.id

    def test_update_missing_raises(self, api):
        with pytest.raises(UserNotFoundError):
            api.update_user("missing", UserPatch(first_name="X"))

    def test_delete(self, api):
        jane = api.search_user("Jane")[0]
        api.delete_user(jane.id)
        assert api.search_user("Jane") == []
        assert len(api.get_users()) == 2

        with pytest.raises(UserNotFoundError):
            api.delete_user(jane.id)

    def test_returned_users_are_copies(self, api):
        users = api.get_users()
        users[0].first_name = "Changed"
        assert api.get_users()[0].first_name == "Ada"

    def test_seeded_users(self):
        seed = [User(id="u1", first_name="Grace", last_name="Hopper")]
        api = InMemoryUsersApi(seed)
        assert api.get_users() == seed
