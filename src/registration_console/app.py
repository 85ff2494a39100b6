"""Application bootstrap for the Registration Console.

Builds the users backend selected by the settings, exposes it over REST when
it is local, and mounts the Gradio console on a FastAPI application.
"""

from typing import Optional

import gradio as gr
import uvicorn
from fastapi import FastAPI

from registration_console.api.base import UsersApi
from registration_console.api.http_client import HttpUsersApi
from registration_console.api.router import (
    create_users_router,
    register_error_handlers,
)
from registration_console.console.controller import RegistrationConsole
from registration_console.models.enums import UsersBackend
from registration_console.observability.logging import get_logger, setup_logging
from registration_console.persistence.in_memory import InMemoryUsersApi
from registration_console.persistence.sql_repository import SQLUsersApi
from registration_console.settings import ConsoleSettings
from registration_console.ui.layout import create_ui

logger = get_logger(__name__)


def build_users_api(settings: ConsoleSettings) -> UsersApi:
    """Instantiates the users backend named by the settings."""
    if settings.users_backend == UsersBackend.HTTP:
        return HttpUsersApi(settings.users_api_url, timeout=settings.http_timeout)
    if settings.users_backend == UsersBackend.MEMORY:
        return InMemoryUsersApi()
    return SQLUsersApi(settings.database_url)


def create_app(settings: Optional[ConsoleSettings] = None) -> FastAPI:
    """Creates the web application.

    Args:
        settings: Configuration to use. Read from the environment if omitted.

    Returns:
        A FastAPI app serving the REST surface (for local backends), a health
        check, and the Gradio console at ``/``.
    """
    settings = settings or ConsoleSettings.from_env()
    users_api = build_users_api(settings)

    app = FastAPI(title="Registration Console")
    app.state.settings = settings
    app.state.users_api = users_api

    if settings.users_backend != UsersBackend.HTTP:
        app.include_router(create_users_router(users_api))
        register_error_handlers(app)

    @app.get("/health")
    def health():
        check = getattr(users_api, "check_health", None)
        healthy = check() if check else True
        return {
            "status": "ok" if healthy else "degraded",
            "backend": settings.users_backend.value,
        }

    def console_factory() -> RegistrationConsole:
        return RegistrationConsole(
            users_api, surface_errors=settings.surface_errors
        )

    demo = create_ui(console_factory)
    app = gr.mount_gradio_app(app, demo, path="/")

    logger.info(
        "Registration console created",
        extra={"extra_fields": {"backend": settings.users_backend.value}},
    )
    return app


def main() -> None:
    settings = ConsoleSettings.from_env()
    setup_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
