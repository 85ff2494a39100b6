"""Write operations with ordered completion handlers.

A ``Mutation`` wraps one backend write. Handlers registered on the mutation
run first, in registration order; handlers passed to ``mutate()`` at the call
site run after them. Failures are recorded on the mutation and logged, and
the pending flag always resets. Nothing is retried or rolled back.
"""

import asyncio
from typing import Any, Callable, Generic, Optional, TypeVar

from registration_console.models.enums import MutationStatus
from registration_console.observability.logging import get_logger
from registration_console.query.cache import resolve

logger = get_logger(__name__)

TVars = TypeVar("TVars")
TResult = TypeVar("TResult")

SuccessHandler = Callable[[Any, Any], Any]
ErrorHandler = Callable[[BaseException, Any], Any]
SettledHandler = Callable[[Any, Optional[BaseException], Any], Any]


class Mutation(Generic[TVars, TResult]):
    """A single write operation and its completion handlers."""

    def __init__(
        self,
        fn: Callable[[TVars], Any],
        *,
        name: str,
        on_success: Optional[SuccessHandler] = None,
        on_error: Optional[ErrorHandler] = None,
        on_settled: Optional[SettledHandler] = None,
    ):
        """Initializes the mutation.

        Args:
            fn: Performs the write. May return a value or an awaitable.
            name: Label used in logs.
            on_success: Optional first success handler, called with
                ``(result, variables)``.
            on_error: Optional first error handler, called with
                ``(error, variables)``.
            on_settled: Optional first settled handler, called with
                ``(result, error, variables)``.
        """
        self.fn = fn
        self.name = name
        self.status = MutationStatus.IDLE
        self.data: Optional[TResult] = None
        self.error: Optional[BaseException] = None
        self.variables: Optional[TVars] = None
        self._success_handlers: list[SuccessHandler] = []
        self._error_handlers: list[ErrorHandler] = []
        self._settled_handlers: list[SettledHandler] = []

        if on_success:
            self.add_success_handler(on_success)
        if on_error:
            self.add_error_handler(on_error)
        if on_settled:
            self.add_settled_handler(on_settled)

    @property
    def is_pending(self) -> bool:
        return self.status == MutationStatus.PENDING

    @property
    def is_error(self) -> bool:
        return self.status == MutationStatus.ERROR

    def add_success_handler(self, handler: SuccessHandler) -> None:
        self._success_handlers.append(handler)

    def add_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    def add_settled_handler(self, handler: SettledHandler) -> None:
        self._settled_handlers.append(handler)

    def mutate(
        self,
        variables: TVars,
        *,
        on_success: Optional[SuccessHandler] = None,
        on_error: Optional[ErrorHandler] = None,
        on_settled: Optional[SettledHandler] = None,
    ) -> asyncio.Task:
        """Dispatches the write and returns the task running it.

        The mutation is pending as soon as this returns. Call-site handlers
        apply to this dispatch only. Must be called from a running event loop.
        """
        self.status = MutationStatus.PENDING
        self.variables = variables
        self.error = None
        return asyncio.ensure_future(
            self._execute(variables, on_success, on_error, on_settled)
        )

    async def mutate_async(self, variables: TVars, **handlers) -> Optional[TResult]:
        """Dispatches the write and waits for it, returning its result."""
        await self.mutate(variables, **handlers)
        return self.data if self.status == MutationStatus.SUCCESS else None

    def reset(self) -> None:
        self.status = MutationStatus.IDLE
        self.data = None
        self.error = None
        self.variables = None

    async def _execute(
        self,
        variables: TVars,
        on_success: Optional[SuccessHandler],
        on_error: Optional[ErrorHandler],
        on_settled: Optional[SettledHandler],
    ) -> None:
        try:
            result = await resolve(self.fn(variables))
        except Exception as e:
            self.error = e
            logger.warning(
                f"Mutation {self.name} failed: {str(e)}",
                extra={"extra_fields": {"mutation": self.name}},
            )
            try:
                for handler in self._handlers(self._error_handlers, on_error):
                    await resolve(handler(e, variables))
                for handler in self._handlers(self._settled_handlers, on_settled):
                    await resolve(handler(None, e, variables))
            finally:
                self.status = MutationStatus.ERROR
            return

        self.data = result
        try:
            for handler in self._handlers(self._success_handlers, on_success):
                await resolve(handler(result, variables))
            for handler in self._handlers(self._settled_handlers, on_settled):
                await resolve(handler(result, None, variables))
        finally:
            self.status = MutationStatus.SUCCESS

        logger.info(
            f"Mutation {self.name} succeeded",
            extra={"extra_fields": {"mutation": self.name}},
        )

    @staticmethod
    def _handlers(registered: list, call_site: Optional[Callable]) -> list:
        return registered + [call_site] if call_site else list(registered)
