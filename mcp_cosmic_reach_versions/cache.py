"""Async caching primitives.

- AsyncTTLCache: in-memory TTL cache used for fetched manifest documents
- InFlightDeduper: concurrent callers of the same key share one task
- AsyncOnce: one-shot lazy initializer (Uninitialized -> Ready) on top of it

All of them are meant for a single event loop; locks are asyncio locks.
TTL calculations use a monotonic clock.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar, cast

K = TypeVar("K")
V = TypeVar("V")

NowFn = Callable[[], float]


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    expires_at: float


class AsyncTTLCache(Generic[K, V]):
    """Bounded in-memory cache with per-entry expiry.

    Oldest insertions are evicted first once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        *,
        default_ttl_seconds: int,
        max_entries: int,
        now_fn: NowFn | None = None,
    ) -> None:
        if default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must be >= 0")
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._default_ttl = float(default_ttl_seconds)
        self._max_entries = int(max_entries)
        self._now: NowFn = now_fn or time.monotonic
        # Insertion order doubles as eviction order
        self._data: "OrderedDict[K, _Entry[V]]" = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: K) -> Optional[V]:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._now():
                del self._data[key]
                return None
            return entry.value

    async def set(self, key: K, value: V, ttl_seconds: Optional[int] = None) -> None:
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0 when provided")
        ttl = float(ttl_seconds) if ttl_seconds is not None else self._default_ttl
        async with self._lock:
            self._data.pop(key, None)
            self._data[key] = _Entry(value=value, expires_at=self._now() + ttl)
            self._purge_expired_unlocked()
            while len(self._data) > self._max_entries:
                self._data.popitem(last=False)

    async def delete(self, key: K) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._data.clear()

    def _purge_expired_unlocked(self) -> None:
        now = self._now()
        expired = [k for k, e in self._data.items() if e.expires_at <= now]
        for k in expired:
            del self._data[k]


class InFlightDeduper(Generic[K, V]):
    """Share one running task per key between concurrent callers.

    Waiters await the task through ``asyncio.shield``, so cancelling one waiter
    leaves the task running for the others. The key is released when the task
    finishes, successfully or not.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._inflight: dict[K, asyncio.Task[V]] = {}

    async def run(self, key: K, coro_factory: Callable[[], Awaitable[V]]) -> V:
        """Join the running task for ``key`` or start one from ``coro_factory``."""

        async with self._lock:
            task = self._inflight.get(key)
            if task is None or task.done():

                async def _runner() -> V:
                    return await coro_factory()

                task = asyncio.create_task(_runner())

                def _release(done: asyncio.Task[V]) -> None:
                    # A newer task may already own the key
                    if self._inflight.get(key) is done:
                        del self._inflight[key]

                task.add_done_callback(_release)
                self._inflight[key] = task

        return await asyncio.shield(task)

    def has_inflight(self, key: K) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()


class AsyncOnce(Generic[V]):
    """Lazily compute a value once and hand the same value to every caller.

    Concurrent first callers share a single call of ``factory``. If it fails,
    every waiter sees the error and the next call starts over.
    """

    _KEY = "value"

    def __init__(self, factory: Callable[[], Awaitable[V]]) -> None:
        self._factory = factory
        self._deduper: InFlightDeduper[str, V] = InFlightDeduper()
        self._value: Optional[V] = None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    async def get(self) -> V:
        if self._ready:
            return cast(V, self._value)
        return await self._deduper.run(self._KEY, self._produce)

    async def _produce(self) -> V:
        # A caller may have queued behind a task that already finished
        if self._ready:
            return cast(V, self._value)
        value = await self._factory()
        self._value = value
        self._ready = True
        return value


__all__ = ["AsyncTTLCache", "InFlightDeduper", "AsyncOnce"]
