"""Registration console session.

``RegistrationConsole`` wires the form, search and deletion controllers to
the query cache and the three mutations. Operations that wait on the backend
are async generators: they yield an interim ``ConsoleView`` (loading or
pending) as soon as the request is dispatched and a final one once it has
settled.
"""

import asyncio
import uuid
from typing import AsyncIterator, Optional

from pydantic import BaseModel, ConfigDict

from registration_console.api.base import UsersApi
from registration_console.console.confirm import DeletionGate
from registration_console.console.form import FormController
from registration_console.console.search import (
    SEARCH_PREFIX,
    USERS_KEY,
    SearchController,
)
from registration_console.models.base import QueryKey, UserId
from registration_console.models.enums import FormMode
from registration_console.models.user import (
    CreateUserInput,
    User,
    UserPatch,
    UserUpdate,
)
from registration_console.observability.logging import get_logger
from registration_console.query.cache import QueryCache, QueryOptions
from registration_console.query.mutation import Mutation


USERS_QUERY_OPTIONS = QueryOptions(stale_time=0.0, refetch_on_window_focus=True)
# Results for a term that is no longer committed are dropped on release.
SEARCH_QUERY_OPTIONS = QueryOptions(
    stale_time=0.0, refetch_on_window_focus=True, gc_time=0.0
)


class ConsoleView(BaseModel):
    """Everything the UI needs to render one frame of the console."""

    model_config = ConfigDict(frozen=True)

    rows: list[User]
    is_loading: bool
    has_error: bool
    first_name: str
    last_name: str
    mode: FormMode
    submit_label: str
    submit_disabled: bool
    delete_disabled: bool
    search_input: str
    search_term: str
    confirm_open: bool
    confirm_title: str
    confirm_message: str


class RegistrationConsole:
    """One user's console: local state plus an injected query cache."""

    def __init__(
        self,
        api: UsersApi,
        cache: Optional[QueryCache] = None,
        *,
        surface_errors: bool = False,
    ):
        """Initializes a console session.

        Args:
            api: The users backend.
            cache: The query cache for this session. A new one is created if
                omitted.
            surface_errors: Queue a notice for failed writes and searches in
                addition to logging them.
        """
        self.api = api
        self.cache = cache if cache is not None else QueryCache()
        self.surface_errors = surface_errors
        self.form = FormController()
        self.search = SearchController()
        self.gate = DeletionGate()
        self.session_id = uuid.uuid4().hex[:12]
        self.logger = get_logger(__name__, session_id=self.session_id)
        self._notices: list[str] = []
        self._started = False

        self.create_mutation: Mutation[CreateUserInput, User] = Mutation(
            self._create_user,
            name="create_user",
            on_success=self._on_created,
            on_error=self._on_write_error,
        )
        self.update_mutation: Mutation[UserUpdate, User] = Mutation(
            self._update_user,
            name="update_user",
            on_success=self._on_updated,
            on_error=self._on_write_error,
        )
        self.delete_mutation: Mutation[UserId, None] = Mutation(
            self._delete_user,
            name="delete_user",
            on_success=self._on_deleted,
            on_error=self._on_write_error,
        )

    # -------------------- backend calls --------------------

    def _create_user(self, data: CreateUserInput):
        return asyncio.to_thread(self.api.create_user, data)

    def _update_user(self, update: UserUpdate):
        return asyncio.to_thread(self.api.update_user, update.id, update.patch)

    def _delete_user(self, user_id: UserId):
        return asyncio.to_thread(self.api.delete_user, user_id)

    def _fetch_users(self):
        return asyncio.to_thread(self.api.get_users)

    def _search_fn(self, term: str):
        def fetch():
            if term:
                return asyncio.to_thread(self.api.search_user, term)
            return asyncio.to_thread(self.api.get_users)

        return fetch

    # -------------------- mutation handlers --------------------

    async def _on_created(self, user: User, data: CreateUserInput) -> None:
        await self.cache.invalidate(USERS_KEY)
        self.form.reset()

    async def _on_updated(self, user: User, update: UserUpdate) -> None:
        await self.cache.invalidate(USERS_KEY)

    async def _on_deleted(self, result: None, user_id: UserId) -> None:
        await self.cache.invalidate(USERS_KEY, SEARCH_PREFIX)

    def _after_update_submit(self, user: User, update: UserUpdate) -> None:
        self.form.exit_edit()
        self.form.reset()

    def _on_write_error(self, error: BaseException, variables) -> None:
        self.logger.info(
            f"Write rejected: {error}",
            extra={
                "extra_fields": {
                    "event": "write_failed",
                    "surfaced": self.surface_errors,
                }
            },
        )
        if self.surface_errors:
            self._notices.append(f"Request failed: {error}")

    # -------------------- queries --------------------

    def _register_search(self) -> QueryKey:
        key = self.search.query_key
        self.cache.build(
            key, self._search_fn(self.search.term), SEARCH_QUERY_OPTIONS
        )
        self.cache.observe(key)
        return key

    def _start_stale(self, keys: list[QueryKey]) -> list[asyncio.Task]:
        return [
            self.cache.start_fetch(key)
            for key in keys
            if self.cache.needs_fetch(key)
        ]

    def _collect_search_error(self) -> None:
        entry = self.cache.get(self.search.query_key)
        if self.surface_errors and entry is not None and entry.is_error:
            self._notices.append(f"Search failed: {entry.error}")

    async def start(self) -> AsyncIterator[ConsoleView]:
        """Registers the list and search queries and loads them."""
        if not self._started:
            self.cache.build(USERS_KEY, self._fetch_users, USERS_QUERY_OPTIONS)
            self.cache.observe(USERS_KEY)
            self._register_search()
            self._started = True
            self.logger.info(
                "Console session started",
                extra={"extra_fields": {"event": "session_started"}},
            )

        tasks = self._start_stale([USERS_KEY, self.search.query_key])
        yield self.view()
        if tasks:
            await asyncio.gather(*tasks)
            self._collect_search_error()
            yield self.view()

    async def window_focused(self) -> AsyncIterator[ConsoleView]:
        """Refetches stale observed queries, as on regaining window focus."""
        await self.cache.refetch_stale(on_focus=True)
        self._collect_search_error()
        yield self.view()

    # -------------------- form --------------------

    def set_field(self, name: str, value: str) -> ConsoleView:
        self.form.set_field(name, value)
        return self.view()

    def begin_edit(self, user: User) -> ConsoleView:
        self.form.begin_edit(user)
        return self.view()

    def cancel_form(self) -> ConsoleView:
        self.form.cancel()
        return self.view()

    async def submit(self) -> AsyncIterator[ConsoleView]:
        """Creates or updates a user from the form, depending on its mode."""
        if self.is_submitting:
            yield self.view()
            return

        if self.form.mode == FormMode.EDIT:
            update = UserUpdate(
                id=self.form.editing_id,
                patch=UserPatch.from_form(self.form.values),
            )
            task = self.update_mutation.mutate(
                update, on_success=self._after_update_submit
            )
        else:
            task = self.create_mutation.mutate(self.form.values.model_copy())

        yield self.view()
        await task
        yield self.view()

    @property
    def is_submitting(self) -> bool:
        return self.create_mutation.is_pending or self.update_mutation.is_pending

    # -------------------- search --------------------

    def type_search(self, value: str) -> ConsoleView:
        self.search.type(value)
        return self.view()

    async def commit_search(self) -> AsyncIterator[ConsoleView]:
        """Queries the typed search text, if it differs from the last one."""
        previous = self.search.query_key
        if not self.search.commit():
            yield self.view()
            return

        if not self._started:
            yield self.view()
            return

        self.cache.release(previous)
        key = self._register_search()
        self.logger.info(
            "Search committed",
            extra={
                "extra_fields": {
                    "event": "search_committed",
                    "query_key": list(key),
                }
            },
        )
        tasks = self._start_stale([key])
        yield self.view()
        if tasks:
            await asyncio.gather(*tasks)
            self._collect_search_error()
            yield self.view()

    # -------------------- deletion --------------------

    def request_delete(self, user_id: UserId) -> ConsoleView:
        if not self.delete_mutation.is_pending:
            self.gate.request(user_id)
        return self.view()

    def cancel_delete(self) -> ConsoleView:
        self.gate.cancel()
        return self.view()

    async def confirm_delete(self) -> AsyncIterator[ConsoleView]:
        """Deletes the user held by the confirmation gate."""
        target = self.gate.confirm()
        if target is None:
            yield self.view()
            return

        self.logger.info(
            "Deletion confirmed",
            extra={
                "extra_fields": {"event": "delete_confirmed", "user_id": target}
            },
        )
        task = self.delete_mutation.mutate(target)
        yield self.view()
        await task
        yield self.view()

    # -------------------- rendering --------------------

    @property
    def rows(self) -> list[User]:
        return list(self.cache.get_data(self.search.query_key) or [])

    def row_at(self, index: int) -> Optional[User]:
        rows = self.rows
        if 0 <= index < len(rows):
            return rows[index]
        return None

    def drain_notices(self) -> list[str]:
        notices, self._notices = self._notices, []
        return notices

    def view(self) -> ConsoleView:
        users = self.cache.get(USERS_KEY)
        results = self.cache.get(self.search.query_key)
        editing = self.form.mode == FormMode.EDIT

        if editing:
            label = "Updating..." if self.update_mutation.is_pending else "Update"
        else:
            label = (
                "Registering..." if self.create_mutation.is_pending else "Register"
            )

        return ConsoleView(
            rows=self.rows,
            is_loading=bool(users and users.is_loading)
            or bool(results and results.is_loading),
            has_error=bool(users and users.is_error),
            first_name=self.form.values.first_name,
            last_name=self.form.values.last_name,
            mode=self.form.mode,
            submit_label=label,
            submit_disabled=self.is_submitting,
            delete_disabled=self.delete_mutation.is_pending,
            search_input=self.search.input_value,
            search_term=self.search.term,
            confirm_open=self.gate.is_open,
            confirm_title=self.gate.title,
            confirm_message=self.gate.message,
        )


async def settle(views: AsyncIterator[ConsoleView]) -> ConsoleView:
    """Consumes an operation's views and returns the final one."""
    last = None
    async for view in views:
        last = view
    return last
