import pytest
from pydantic import ValidationError

from registration_console.models.enums import UsersBackend
from registration_console.persistence.db import DEFAULT_SQLITE_URL
from registration_console.settings import ConsoleSettings


class TestConsoleSettings:
    def test_defaults(self):
        settings = ConsoleSettings.from_env({})
        assert settings.database_url == DEFAULT_SQLITE_URL
        assert settings.users_backend == UsersBackend.SQL
        assert settings.surface_errors is False
        assert settings.log_level == "INFO"
        assert (settings.host, settings.port) == ("0.0.0.0", 7860)

    def test_from_env(self):
        settings = ConsoleSettings.from_env(
            {
                "DATABASE_URL": "sqlite:///:memory:",
                "USERS_BACKEND": "MEMORY",
                "SURFACE_ERRORS": "yes",
                "LOG_LEVEL": "debug",
                "HOST": "127.0.0.1",
                "PORT": "8080",
            }
        )
        assert settings.database_url == "sqlite:///:memory:"
        assert settings.users_backend == UsersBackend.MEMORY
        assert settings.surface_errors is True
        assert settings.log_level == "DEBUG"
        assert settings.host == "127.0.0.1"
        assert settings.port == 8080

    def test_api_url_implies_http_backend(self):
        settings = ConsoleSettings.from_env(
            {"USERS_API_URL": "http://users.local", "HTTP_TIMEOUT": "3"}
        )
        assert settings.users_backend == UsersBackend.HTTP
        assert settings.http_timeout == 3.0

    def test_http_backend_requires_url(self):
        with pytest.raises(ValidationError):
            ConsoleSettings.from_env({"USERS_BACKEND": "http"})

    @pytest.mark.parametrize("env", [{"PORT": "0"}, {"USERS_BACKEND": "redis"}])
    def test_invalid_values(self, env):
        with pytest.raises(ValidationError):
            ConsoleSettings.from_env(env)

    def test_surface_errors_falsy(self):
        assert ConsoleSettings.from_env({"SURFACE_ERRORS": "off"}).surface_errors is False
