"""CLI tool for the Registration Console."""

from typing import Optional

import typer
from typing_extensions import Annotated

from registration_console.api.base import UsersApi
from registration_console.api.errors import UsersApiError
from registration_console.app import build_users_api
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.settings import ConsoleSettings


app = typer.Typer(help="Registration Console Management CLI")
user_app = typer.Typer(help="Manage user registrations")

app.add_typer(user_app, name="user")


def get_api() -> UsersApi:
    return build_users_api(ConsoleSettings.from_env())


def _print_users(users: list[User]) -> None:
    if not users:
        typer.echo("No users found.")
        return
    for u in users:
        typer.echo(f"{u.id}: {u.first_name} {u.last_name}")


def _fail(error: UsersApiError) -> None:
    typer.echo(f"Error: {error.message}", err=True)
    raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: Annotated[
        Optional[str], typer.Option(help="Bind address (overrides HOST)")
    ] = None,
    port: Annotated[
        Optional[int], typer.Option(help="Port (overrides PORT)")
    ] = None,
):
    """Starts the web console."""
    import uvicorn

    from registration_console.app import create_app
    from registration_console.observability.logging import setup_logging

    settings = ConsoleSettings.from_env()
    if host:
        settings.host = host
    if port:
        settings.port = port
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


@user_app.command("list")
def user_list():
    """Lists all registered users."""
    try:
        users = get_api().get_users()
    except UsersApiError as e:
        _fail(e)
    _print_users(users)


@user_app.command("search")
def user_search(
    term: Annotated[str, typer.Argument(help="Text to match against names")],
):
    """Searches users by name."""
    try:
        users = get_api().search_user(term)
    except UsersApiError as e:
        _fail(e)
    _print_users(users)


@user_app.command("create")
def user_create(
    first_name: Annotated[str, typer.Option(help="First name")],
    last_name: Annotated[str, typer.Option(help="Last name")],
):
    """Registers a new user."""
    try:
        user = get_api().create_user(
            CreateUserInput(first_name=first_name, last_name=last_name)
        )
    except UsersApiError as e:
        _fail(e)
    typer.echo(f"User created: {user.full_name} (ID: {user.id})")


@user_app.command("update")
def user_update(
    user_id: Annotated[str, typer.Argument(help="The user ID to update")],
    first_name: Annotated[
        Optional[str], typer.Option(help="New first name")
    ] = None,
    last_name: Annotated[
        Optional[str], typer.Option(help="New last name")
    ] = None,
):
    """Updates a user's names."""
    patch = UserPatch(first_name=first_name, last_name=last_name)
    if not patch.changes():
        typer.echo("Nothing to update: pass --first-name or --last-name.", err=True)
        raise typer.Exit(code=1)
    try:
        user = get_api().update_user(user_id, patch)
    except UsersApiError as e:
        _fail(e)
    typer.echo(f"User updated: {user.full_name} (ID: {user.id})")


@user_app.command("delete")
def user_delete(
    user_id: Annotated[str, typer.Argument(help="The user ID to delete")],
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")
    ] = False,
):
    """Deletes a user after confirmation."""
    if not yes:
        typer.confirm(
            "Are you sure you want to delete this user? This action cannot be undone.",
            abort=True,
        )
    try:
        get_api().delete_user(user_id)
    except UsersApiError as e:
        _fail(e)
    typer.echo(f"User deleted: {user_id}")


if __name__ == "__main__":
    app()
