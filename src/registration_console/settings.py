"""Runtime configuration for the Registration Console.

Settings are read from environment variables:

    DATABASE_URL     SQLAlchemy URL for the SQL backend.
    USERS_BACKEND    One of ``sql``, ``memory`` or ``http``.
    USERS_API_URL    Base URL of a remote users service; implies ``http``.
    HTTP_TIMEOUT     Request timeout for the HTTP backend, in seconds.
    SURFACE_ERRORS   Show a notice when a write or search fails.
    LOG_LEVEL        Root log level.
    HOST, PORT       Bind address of the web server.
"""

import os
from typing import Mapping, Optional

from pydantic import Field, field_validator, model_validator

from registration_console.models.base import ModelBase
from registration_console.models.enums import UsersBackend
from registration_console.persistence.db import DEFAULT_SQLITE_URL

_TRUTHY = {"1", "true", "yes", "on"}


class ConsoleSettings(ModelBase):
    """Configuration for the console, its backend and the web server."""

    database_url: str = Field(default=DEFAULT_SQLITE_URL)
    users_backend: UsersBackend = Field(default=UsersBackend.SQL)
    users_api_url: Optional[str] = Field(default=None)
    http_timeout: float = Field(default=10.0, gt=0)
    surface_errors: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=7860, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _check_backend(self) -> "ConsoleSettings":
        if self.users_backend == UsersBackend.HTTP and not self.users_api_url:
            raise ValueError("USERS_API_URL is required for the http backend")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConsoleSettings":
        """Builds settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values: dict = {}

        if env.get("DATABASE_URL"):
            values["database_url"] = env["DATABASE_URL"]
        if env.get("USERS_API_URL"):
            values["users_api_url"] = env["USERS_API_URL"]
            values["users_backend"] = UsersBackend.HTTP
        if env.get("USERS_BACKEND"):
            values["users_backend"] = env["USERS_BACKEND"].lower()
        if env.get("HTTP_TIMEOUT"):
            values["http_timeout"] = env["HTTP_TIMEOUT"]
        if env.get("SURFACE_ERRORS"):
            values["surface_errors"] = env["SURFACE_ERRORS"].lower() in _TRUTHY
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"]
        if env.get("HOST"):
            values["host"] = env["HOST"]
        if env.get("PORT"):
            values["port"] = env["PORT"]

        return cls(**values)
