"""HTTP client for a remote users API.

Talks to the REST surface served by ``registration_console.api.router``.
"""

from typing import Any, Optional
from urllib.parse import quote

import requests

from registration_console.api.base import UsersApi
from registration_console.api.errors import (
    BackendUnavailableError,
    UserNotFoundError,
    UsersApiError,
    UserValidationError,
)
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.observability.logging import get_logger

logger = get_logger(__name__)


class HttpUsersApi(UsersApi):
    """UsersApi backed by a remote REST service."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """Initializes the client.

        Args:
            base_url: Root URL of the service, e.g. ``http://localhost:7860``.
            timeout: Per-request timeout in seconds.
            session: Optional pre-configured requests session.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def _user_path(user_id: str) -> str:
        return "/" + quote(user_id, safe="")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/users{path}"

    def _request(
        self, method: str, path: str, *, user_id: Optional[str] = None, **kwargs
    ) -> Any:
        url = self._url(path)
        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning(f"Users API unreachable: {method} {url}: {str(e)}")
            raise BackendUnavailableError(str(e)) from e

        if response.status_code == 404:
            raise UserNotFoundError(user_id or url)
        if response.status_code == 422:
            raise UserValidationError(self._detail(response))
        if not response.ok:
            raise UsersApiError(
                self._detail(response), status_code=response.status_code
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and "detail" in body:
            return str(body["detail"])
        return str(body)

    def get_users(self) -> list[User]:
        data = self._request("GET", "")
        return [User.model_validate(item) for item in data or []]

    def search_user(self, term: str) -> list[User]:
        data = self._request("GET", "/search", params={"q": term})
        return [User.model_validate(item) for item in data or []]

    def create_user(self, data: CreateUserInput) -> User:
        body = self._request(
            "POST", "", json=data.model_dump(mode="json", by_alias=True)
        )
        return User.model_validate(body)

    def update_user(self, user_id: str, patch: UserPatch) -> User:
        body = self._request(
            "PATCH",
            self._user_path(user_id),
            user_id=user_id,
            json=patch.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return User.model_validate(body)

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", self._user_path(user_id), user_id=user_id)
