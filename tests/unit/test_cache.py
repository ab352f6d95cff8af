import asyncio

import pytest

from mcp_cosmic_reach_versions.cache import AsyncOnce, AsyncTTLCache, InFlightDeduper


class FakeClock:
    def __init__(self) -> None:
        self.t = 0.0

    def __call__(self) -> float:
        return self.t


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.mark.asyncio
async def test_ttl_cache_expires_entries(clock: FakeClock) -> None:
    cache: AsyncTTLCache[str, str] = AsyncTTLCache(
        default_ttl_seconds=60, max_entries=4, now_fn=clock
    )
    await cache.set("manifest", "v1")
    await cache.set("short", "v2", ttl_seconds=1)

    clock.t = 0.5
    assert await cache.get("manifest") == "v1"
    assert await cache.get("short") == "v2"

    clock.t = 1.0
    assert await cache.get("short") is None

    clock.t = 60.0
    assert await cache.get("manifest") is None


@pytest.mark.asyncio
async def test_ttl_cache_evicts_oldest_insertion(clock: FakeClock) -> None:
    cache: AsyncTTLCache[str, int] = AsyncTTLCache(
        default_ttl_seconds=100, max_entries=2, now_fn=clock
    )
    await cache.set("a", 1)
    await cache.set("b", 2)
    # Re-setting moves a key to the back of the line
    await cache.set("a", 10)
    await cache.set("c", 3)

    assert await cache.get("b") is None
    assert await cache.get("a") == 10
    assert await cache.get("c") == 3


@pytest.mark.asyncio
async def test_ttl_cache_delete_and_clear(clock: FakeClock) -> None:
    cache: AsyncTTLCache[str, int] = AsyncTTLCache(
        default_ttl_seconds=10, max_entries=10, now_fn=clock
    )
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.delete("a")
    assert await cache.get("a") is None
    assert await cache.get("b") == 2

    await cache.clear()
    assert await cache.get("b") is None


def test_ttl_cache_rejects_bad_limits() -> None:
    with pytest.raises(ValueError):
        AsyncTTLCache(default_ttl_seconds=-1, max_entries=1)
    with pytest.raises(ValueError):
        AsyncTTLCache(default_ttl_seconds=1, max_entries=0)


@pytest.mark.asyncio
async def test_deduper_shares_one_call() -> None:
    deduper: InFlightDeduper[str, int] = InFlightDeduper()
    release = asyncio.Event()
    calls = 0

    async def factory() -> int:
        nonlocal calls
        calls += 1
        await release.wait()
        return 42

    tasks = [asyncio.create_task(deduper.run("key", factory)) for _ in range(5)]
    await asyncio.sleep(0)
    assert deduper.has_inflight("key")

    release.set()
    assert await asyncio.gather(*tasks) == [42] * 5
    assert calls == 1
    assert not deduper.has_inflight("key")


@pytest.mark.asyncio
async def test_deduper_cancelled_waiter_leaves_task_running() -> None:
    deduper: InFlightDeduper[str, str] = InFlightDeduper()
    started = asyncio.Event()
    release = asyncio.Event()

    async def factory() -> str:
        started.set()
        await release.wait()
        return "ok"

    w1 = asyncio.create_task(deduper.run("k", factory))
    w2 = asyncio.create_task(deduper.run("k", factory))
    await started.wait()

    w1.cancel()
    with pytest.raises(asyncio.CancelledError):
        await w1

    release.set()
    assert await w2 == "ok"


@pytest.mark.asyncio
async def test_once_runs_factory_once_for_concurrent_callers() -> None:
    release = asyncio.Event()
    calls = 0

    async def load() -> dict[str, int]:
        nonlocal calls
        calls += 1
        await release.wait()
        return {"1.17": 1}

    once: AsyncOnce[dict[str, int]] = AsyncOnce(load)
    assert not once.ready

    tasks = [asyncio.create_task(once.get()) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks)

    assert calls == 1
    assert once.ready
    assert all(r is results[0] for r in results)
    assert await once.get() is results[0]
    assert calls == 1


@pytest.mark.asyncio
async def test_once_failure_reaches_every_waiter_and_allows_retry() -> None:
    release = asyncio.Event()
    attempts = 0

    class Boom(RuntimeError):
        pass

    async def load() -> str:
        nonlocal attempts
        attempts += 1
        await release.wait()
        if attempts == 1:
            raise Boom("manifest unavailable")
        return "loaded"

    once: AsyncOnce[str] = AsyncOnce(load)
    t1 = asyncio.create_task(once.get())
    t2 = asyncio.create_task(once.get())
    await asyncio.sleep(0)
    release.set()

    for t in (t1, t2):
        with pytest.raises(Boom):
            await t
    assert attempts == 1
    assert not once.ready

    assert await once.get() == "loaded"
    assert attempts == 2
    assert once.ready
