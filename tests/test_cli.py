from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from registration_console.cli import app, get_api
from registration_console.persistence.sql_repository import SQLUsersApi

runner = CliRunner()


class TestCLI:
    @pytest.fixture(autouse=True)
    def setup_db(self, tmp_path, monkeypatch):
        db_file = tmp_path / "test_cli.db"
        self.db_url = f"sqlite:///{db_file}"
        monkeypatch.delenv("USERS_API_URL", raising=False)
        monkeypatch.setenv("USERS_BACKEND", "sql")
        monkeypatch.setenv("DATABASE_URL", self.db_url)

    def create(self, first, last):
        result = runner.invoke(
            app, ["user", "create", "--first-name", first, "--last-name", last]
        )
        assert result.exit_code == 0
        return get_api().search_user(f"{first} {last}")[0]

    def test_get_api_uses_environment(self):
        assert isinstance(get_api(), SQLUsersApi)

    def test_user_create_and_list(self):
        result = runner.invoke(
            app, ["user", "create", "--first-name", "Ada", "--last-name", "Lovelace"]
        )
        assert result.exit_code == 0
        assert "User created: Ada Lovelace (ID: " in result.output

        user = get_api().get_users()[0]
        result = runner.invoke(app, ["user", "list"])
        assert result.exit_code == 0
        assert f"{user.id}: Ada Lovelace" in result.output

    def test_empty_list(self):
        result = runner.invoke(app, ["user", "list"])
        assert result.exit_code == 0
        assert "No users found." in result.output

    def test_search(self):
        self.create("Ada", "Lovelace")
        self.create("Alan", "Turing")

        result = runner.invoke(app, ["user", "search", "turing"])
        assert result.exit_code == 0
        assert "Alan Turing" in result.output
        assert "Ada" not in result.output

    def test_update(self):
        user = self.create("Jane", "Austen")

        result = runner.invoke(
            app, ["user", "update", user.id, "--last-name", "Bennet"]
        )
        assert result.exit_code == 0
        assert f"User updated: Jane Bennet (ID: {user.id})" in result.output

    def test_update_requires_a_change(self):
        user = self.create("Jane", "Austen")
        result = runner.invoke(app, ["user", "update", user.id])
        assert result.exit_code == 1

    def test_update_unknown_user(self):
        result = runner.invoke(app, ["user", "update", "nope", "--first-name", "X"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_delete_with_confirmation(self):
        user = self.create("Jane", "Austen")

        result = runner.invoke(app, ["user", "delete", user.id], input="n\n")
        assert result.exit_code == 1
        assert len(get_api().get_users()) == 1

        result = runner.invoke(app, ["user", "delete", user.id], input="y\n")
        assert result.exit_code == 0
        assert f"User deleted: {user.id}" in result.output
        assert get_api().get_users() == []

    def test_delete_skip_prompt(self):
        user = self.create("Jane", "Austen")
        result = runner.invoke(app, ["user", "delete", user.id, "--yes"])
        assert result.exit_code == 0
        assert get_api().get_users() == []

    def test_delete_unknown_user(self):
        result = runner.invoke(app, ["user", "delete", "nope", "-y"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_serve(self):
        with patch("uvicorn.run") as mock_run, \
             patch("registration_console.app.create_app") as mock_create, \
             patch("registration_console.observability.logging.setup_logging"):
            result = runner.invoke(app, ["serve", "--port", "8123"])

        assert result.exit_code == 0
        settings = mock_create.call_args[0][0]
        assert settings.port == 8123
        assert mock_run.call_args.kwargs["port"] == 8123
