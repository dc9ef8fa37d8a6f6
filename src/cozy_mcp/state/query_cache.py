"""
Process-wide query cache.

Cached server responses are stored under tuple keys. An entry is served
from memory while it is fresh; once stale (older than ``stale_time`` or
explicitly invalidated) the next read refetches it.

Guarantees:
    - at most one in-flight request per key; concurrent readers share it
    - every invalidation or forced refetch bumps the key's generation, and
      a response is written only if its generation is still current, so a
      newer request always supersedes an older one
    - failed reads are retried ``retry`` times with doubling delay, except
      for 4xx responses and local auth, validation or configuration errors,
      which cannot succeed on retry
    - entries nobody read for ``gc_time`` seconds are evicted

Mutations never go through the cache; callers invalidate afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from cozy_mcp.exceptions import (
    CozyAPIError,
    CozyAuthenticationError,
    CozyConfigurationError,
    CozyValidationError,
)
from cozy_mcp.state.query_keys import QueryKey

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
KeyPredicate = Callable[[QueryKey], bool]


def _is_retryable(e: Exception) -> bool:
    if isinstance(e, (CozyAuthenticationError, CozyValidationError, CozyConfigurationError)):
        return False
    return not (isinstance(e, CozyAPIError) and e.is_client_error)


class QueryStatus(str, Enum):
    """Lifecycle of a cached query."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class QueryState:
    """Snapshot of one cache entry."""

    key: QueryKey
    status: QueryStatus
    data: Any = None
    error: Optional[BaseException] = None
    updated_at: Optional[float] = None
    is_stale: bool = True
    is_fetching: bool = False

    @property
    def is_loading(self) -> bool:
        """No data yet and nothing failed."""
        return self.status == QueryStatus.PENDING

    @property
    def is_error(self) -> bool:
        return self.status == QueryStatus.ERROR


class _Entry:
    __slots__ = (
        "data",
        "error",
        "status",
        "updated_at",
        "invalidated",
        "generation",
        "in_flight",
        "in_flight_generation",
        "last_accessed",
    )

    def __init__(self, now: float) -> None:
        self.data: Any = None
        self.error: Optional[BaseException] = None
        self.status = QueryStatus.PENDING
        self.updated_at: Optional[float] = None
        self.invalidated = False
        self.generation = 0
        self.in_flight: Optional[asyncio.Future[Any]] = None
        self.in_flight_generation = -1
        self.last_accessed = now


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


class QueryCache:
    """
    Keyed cache of server reads.

    Args:
        stale_time: Seconds a successful result is served without refetch
        gc_time: Seconds an unread entry is kept before eviction
        retry: Extra attempts for a failed read
        retry_delay: Delay before the first retry; doubles each attempt
        clock: Monotonic time source (injectable for tests)
        sleep: Async sleep (injectable for tests)
    """

    def __init__(
        self,
        stale_time: float = 60.0,
        gc_time: float = 300.0,
        retry: int = 3,
        retry_delay: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.stale_time = stale_time
        self.gc_time = gc_time
        self.retry = retry
        self.retry_delay = retry_delay
        self._clock = clock
        self._sleep = sleep
        self._entries: dict[QueryKey, _Entry] = {}

    # =========================================================================
    # Reads
    # =========================================================================

    async def fetch(self, key: QueryKey, fn: Fetcher, *, force: bool = False) -> Any:
        """
        Return fresh data for ``key``, calling ``fn`` if needed.

        Args:
            key: Query key
            fn: Coroutine function performing the request
            force: Refetch even if the cached data is fresh

        Raises:
            Whatever ``fn`` raised on its final attempt.
        """
        self.collect_garbage()
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry(now)
        entry.last_accessed = now

        if force:
            entry.generation += 1
        elif entry.status == QueryStatus.SUCCESS and not self._is_stale(entry, now):
            return entry.data

        if entry.in_flight is not None and entry.in_flight_generation == entry.generation:
            return await asyncio.shield(entry.in_flight)

        generation = entry.generation
        future = asyncio.ensure_future(self._run(key, entry, fn, generation))
        entry.in_flight = future
        entry.in_flight_generation = generation
        return await asyncio.shield(future)

    async def _run(self, key: QueryKey, entry: _Entry, fn: Fetcher, generation: int) -> Any:
        delay = self.retry_delay
        try:
            for attempt in range(self.retry + 1):
                try:
                    data = await fn()
                except Exception as e:
                    if attempt >= self.retry or not _is_retryable(e):
                        self._write_error(key, entry, e, generation)
                        raise
                    logger.warning(
                        "Query %s failed (attempt %d/%d): %s",
                        key,
                        attempt + 1,
                        self.retry + 1,
                        e,
                    )
                    await self._sleep(delay)
                    delay *= 2
                else:
                    self._write_data(key, entry, data, generation)
                    return data
        finally:
            if entry.in_flight_generation == generation:
                entry.in_flight = None
                entry.in_flight_generation = -1
        raise AssertionError("unreachable")  # pragma: no cover

    def _is_current(self, key: QueryKey, entry: _Entry, generation: int) -> bool:
        return self._entries.get(key) is entry and entry.generation == generation

    def _write_data(self, key: QueryKey, entry: _Entry, data: Any, generation: int) -> None:
        if not self._is_current(key, entry, generation):
            logger.debug("Discarding superseded result for %s", key)
            return
        entry.data = data
        entry.error = None
        entry.status = QueryStatus.SUCCESS
        entry.updated_at = self._clock()
        entry.invalidated = False

    def _write_error(self, key: QueryKey, entry: _Entry, error: BaseException, generation: int) -> None:
        if not self._is_current(key, entry, generation):
            return
        # previously fetched data stays available next to the error
        entry.error = error
        entry.status = QueryStatus.ERROR

    def _is_stale(self, entry: _Entry, now: float) -> bool:
        if entry.invalidated or entry.updated_at is None:
            return True
        return now - entry.updated_at >= self.stale_time

    def get(self, key: QueryKey) -> QueryState:
        """Snapshot of ``key`` without triggering a fetch."""
        entry = self._entries.get(key)
        if entry is None:
            return QueryState(key=key, status=QueryStatus.PENDING)
        return QueryState(
            key=key,
            status=entry.status,
            data=entry.data,
            error=entry.error,
            updated_at=entry.updated_at,
            is_stale=self._is_stale(entry, self._clock()),
            is_fetching=entry.in_flight is not None,
        )

    def peek(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def is_stale(self, key: QueryKey) -> bool:
        return self.get(key).is_stale

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    # =========================================================================
    # Writes
    # =========================================================================

    def set_data(self, key: QueryKey, data: Any) -> None:
        """Seed an entry, e.g. with server-prefetched data."""
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry(self._clock())
        entry.generation += 1
        self._write_data(key, entry, data, entry.generation)

    def invalidate(self, prefix: QueryKey, predicate: KeyPredicate | None = None) -> list[QueryKey]:
        """
        Mark every key starting with ``prefix`` stale.

        Results of requests already in flight for those keys will be
        discarded. Returns the keys that were marked.
        """
        marked: list[QueryKey] = []
        for key, entry in self._entries.items():
            if not matches_prefix(key, prefix):
                continue
            if predicate is not None and not predicate(key):
                continue
            entry.invalidated = True
            entry.generation += 1
            marked.append(key)
        if marked:
            logger.debug("Invalidated %d queries under %s", len(marked), prefix)
        return marked

    def remove(self, prefix: QueryKey) -> list[QueryKey]:
        """Drop every entry under ``prefix``."""
        removed = [key for key in self._entries if matches_prefix(key, prefix)]
        for key in removed:
            del self._entries[key]
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def collect_garbage(self) -> list[QueryKey]:
        """Evict idle entries not read within ``gc_time``."""
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if entry.in_flight is None and now - entry.last_accessed > self.gc_time
        ]
        for key in expired:
            del self._entries[key]
        return expired
