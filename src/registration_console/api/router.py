"""REST surface for a users backend.

Exposes any ``UsersApi`` implementation over HTTP so that consoles on other
hosts can reach it through ``HttpUsersApi``.
"""

from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from registration_console.api.base import UsersApi
from registration_console.api.errors import UsersApiError
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.observability.logging import get_logger

logger = get_logger(__name__)


def create_users_router(users_api: UsersApi) -> APIRouter:
    """Builds the ``/api/users`` router for a backend.

    Args:
        users_api: The backend that serves every request.

    Returns:
        A FastAPI router ready to be included in an application.
    """
    router = APIRouter(prefix="/api/users", tags=["users"])

    @router.get("", response_model=list[User])
    def list_users():
        return users_api.get_users()

    @router.get("/search", response_model=list[User])
    def search_users(q: str = Query(default="", description="Search term")):
        return users_api.search_user(q)

    @router.post(
        "", response_model=User, status_code=status.HTTP_201_CREATED
    )
    def create_user(data: CreateUserInput):
        return users_api.create_user(data)

    @router.patch("/{user_id}", response_model=User)
    def update_user(user_id: str, patch: UserPatch):
        return users_api.update_user(user_id, patch)

    @router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(user_id: str):
        users_api.delete_user(user_id)

    return router


def register_error_handlers(app: FastAPI) -> None:
    """Maps UsersApiError subclasses to JSON error responses."""

    @app.exception_handler(UsersApiError)
    async def users_api_error_handler(request: Request, exc: UsersApiError):
        logger.warning(
            f"Users API error on {request.method} {request.url.path}: {exc.message}",
            extra={"extra_fields": {"status_code": exc.status_code}},
        )
        return JSONResponse(
            status_code=exc.status_code, content={"detail": exc.message}
        )
