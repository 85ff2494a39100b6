"""Keyed query cache for console reads.

Entries are addressed by tuple keys such as ``("users",)`` or
``("users", "search", "jane")``. Invalidation matches keys by prefix, so
invalidating ``("users",)`` also covers every search entry. Concurrent fetches
of one key share a single in-flight task. A failed fetch records its error,
keeps the previous data and is not retried. Once an entry loses its last
observer it is kept for ``gc_time`` seconds and then dropped.

The cache is meant to be created per console session and passed to the
console explicitly; it is not a process-wide singleton.
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from registration_console.models.base import QueryKey
from registration_console.models.enums import QueryStatus
from registration_console.observability.logging import get_logger

logger = get_logger(__name__)

QueryFn = Callable[[], Union[Awaitable[Any], Any]]


async def resolve(value: Any) -> Any:
    """Awaits ``value`` if it is awaitable, otherwise returns it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class QueryOptions:
    """Freshness policy for a cached query.

    Attributes:
        stale_time: Seconds after a successful fetch during which the data is
            considered fresh. Zero means it is never fresh.
        refetch_on_window_focus: Whether a window focus refetches stale data.
        enabled: Disabled queries are never fetched automatically.
        gc_time: Seconds an entry without observers is kept before it is
            removed. Zero removes it as soon as it is released and idle.
    """

    stale_time: float = 0.0
    refetch_on_window_focus: bool = True
    enabled: bool = True
    gc_time: float = 300.0


@dataclass
class QueryEntry:
    """State of a single cached query."""

    key: QueryKey
    fn: QueryFn
    options: QueryOptions = field(default_factory=QueryOptions)
    data: Any = None
    error: Optional[BaseException] = None
    status: QueryStatus = QueryStatus.PENDING
    updated_at: Optional[float] = None
    is_invalidated: bool = False
    fetch_count: int = 0
    observers: int = 0
    released_at: Optional[float] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()

    @property
    def is_loading(self) -> bool:
        """True while the first fetch of this key is in flight."""
        return self.status == QueryStatus.PENDING and self.is_fetching

    @property
    def is_error(self) -> bool:
        return self.status == QueryStatus.ERROR

    @property
    def is_active(self) -> bool:
        return self.observers > 0

    def is_stale(self, now: float) -> bool:
        if self.is_invalidated or self.updated_at is None:
            return True
        return now - self.updated_at >= self.options.stale_time

    def is_collectable(self, now: float) -> bool:
        """True once a released, idle entry has outlived its ``gc_time``."""
        if self.is_active or self.is_fetching or self.released_at is None:
            return False
        return now - self.released_at >= self.options.gc_time


class QueryCache:
    """Store of query results keyed by tuple keys."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[QueryKey, QueryEntry] = {}
        self._clock = clock

    def __contains__(self, key: QueryKey) -> bool:
        return tuple(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: QueryKey) -> Optional[QueryEntry]:
        return self._entries.get(tuple(key))

    def get_data(self, key: QueryKey) -> Any:
        entry = self.get(key)
        return entry.data if entry else None

    def build(
        self,
        key: QueryKey,
        fn: QueryFn,
        options: Optional[QueryOptions] = None,
    ) -> QueryEntry:
        """Returns the entry for ``key``, creating it if needed.

        The entry's query function and options are replaced by the ones
        given, so the latest registration always wins.
        """
        key = tuple(key)
        entry = self._entries.get(key)
        if entry is None:
            entry = QueryEntry(key=key, fn=fn, options=options or QueryOptions())
            self._entries[key] = entry
        else:
            entry.fn = fn
            if options is not None:
                entry.options = options
        return entry

    def find_all(self, prefix: QueryKey = ()) -> list[QueryEntry]:
        """Returns every entry whose key starts with ``prefix``."""
        prefix = tuple(prefix)
        return [
            entry
            for key, entry in self._entries.items()
            if key[: len(prefix)] == prefix
        ]

    def observe(self, key: QueryKey) -> QueryEntry:
        entry = self._require(key)
        entry.observers += 1
        entry.released_at = None
        return entry

    def release(self, key: QueryKey) -> None:
        """Drops one observer and collects entries past their ``gc_time``."""
        entry = self.get(key)
        if entry is not None and entry.observers > 0:
            entry.observers -= 1
            if entry.observers == 0:
                entry.released_at = self._clock()
        self.collect_garbage()

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(tuple(key), None)

    def collect_garbage(self) -> list[QueryKey]:
        """Removes released entries whose ``gc_time`` has elapsed.

        Entries that were never observed, or that have a fetch in flight, are
        kept.

        Returns:
            The keys that were removed.
        """
        now = self._clock()
        removed = [
            key
            for key, entry in self._entries.items()
            if entry.is_collectable(now)
        ]
        for key in removed:
            self.remove(key)
        if removed:
            logger.debug(
                "Query cache entries collected",
                extra={"extra_fields": {"removed": [list(k) for k in removed]}},
            )
        return removed

    def start_fetch(self, key: QueryKey) -> asyncio.Task:
        """Schedules a fetch of ``key`` and returns its task.

        If a fetch of the same key is already in flight its task is returned
        instead of starting another request.
        """
        entry = self._require(key)
        if entry.is_fetching:
            return entry.task
        entry.task = asyncio.ensure_future(self._run(entry))
        return entry.task

    async def fetch(self, key: QueryKey) -> QueryEntry:
        entry = self._require(key)
        await self.start_fetch(key)
        return entry

    def needs_fetch(self, key: QueryKey) -> bool:
        entry = self._require(key)
        return entry.options.enabled and entry.is_stale(self._clock())

    async def ensure(
        self,
        key: QueryKey,
        fn: QueryFn,
        options: Optional[QueryOptions] = None,
    ) -> QueryEntry:
        """Builds the entry and fetches it if its data is stale."""
        entry = self.build(key, fn, options)
        if self.needs_fetch(key):
            await self.fetch(key)
        return entry

    async def invalidate(
        self, *prefixes: QueryKey, refetch_active: bool = True
    ) -> list[QueryEntry]:
        """Marks matching entries stale and refetches the active ones.

        Inactive entries stay stale and are refetched the next time they are
        read through ``ensure``. An entry matched by several prefixes is
        refetched once.

        Args:
            prefixes: Key prefixes selecting the entries to invalidate.
            refetch_active: Whether observed entries are refetched before
                this call returns.

        Returns:
            The entries that were invalidated.
        """
        matched: dict[QueryKey, QueryEntry] = {}
        for prefix in prefixes:
            for entry in self.find_all(prefix):
                matched.setdefault(entry.key, entry)
        entries = list(matched.values())
        for entry in entries:
            entry.is_invalidated = True

        logger.debug(
            "Query cache invalidated",
            extra={
                "extra_fields": {
                    "prefixes": [list(p) for p in prefixes],
                    "matched": len(entries),
                }
            },
        )

        if refetch_active:
            await self._refetch([e for e in entries if e.is_active])
        return entries

    async def refetch_stale(self, *, on_focus: bool = False) -> list[QueryEntry]:
        """Refetches every active, enabled entry whose data is stale.

        Args:
            on_focus: Restrict to entries that opt into window-focus refetch.
        """
        now = self._clock()
        targets = [
            entry
            for entry in self._entries.values()
            if entry.is_active
            and entry.options.enabled
            and (entry.options.refetch_on_window_focus or not on_focus)
            and entry.is_stale(now)
        ]
        await self._refetch(targets)
        return targets

    async def _refetch(self, entries: list[QueryEntry]) -> None:
        # An in-flight request may predate the change that caused the
        # refetch, so wait for it and then issue a new one.
        for entry in entries:
            if entry.is_fetching:
                await entry.task
        entries = [e for e in entries if e.key in self]
        if entries:
            await asyncio.gather(*(self.start_fetch(e.key) for e in entries))

    def _require(self, key: QueryKey) -> QueryEntry:
        entry = self.get(key)
        if entry is None:
            raise KeyError(f"Unknown query key: {key!r}")
        return entry

    async def _run(self, entry: QueryEntry) -> None:
        entry.is_invalidated = False
        entry.fetch_count += 1
        try:
            data = await resolve(entry.fn())
        except Exception as e:
            entry.error = e
            entry.status = QueryStatus.ERROR
            logger.warning(
                f"Query {entry.key!r} failed: {str(e)}",
                extra={"extra_fields": {"query_key": list(entry.key)}},
            )
        else:
            entry.data = data
            entry.error = None
            entry.status = QueryStatus.SUCCESS
            entry.updated_at = self._clock()

        # Released while fetching: collect once the task is done.
        if entry.released_at is not None:
            asyncio.get_running_loop().call_soon(self.collect_garbage)
