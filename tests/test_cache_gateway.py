"""Tests for the cache-aside gateway and the in-memory store."""

import asyncio

import pytest

from rp_roster.storage.cache_gateway import CacheGateway
from rp_roster.storage.memory_store import InMemoryCacheStore
from rp_roster.utils.misc_utils import cache_key_for_board


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingCompute:
    def __init__(self, value, delay=0.0):
        self.value = value
        self.delay = delay
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.value


def test_cache_key_for_board():
    assert cache_key_for_board("abc123") == "cardData_abc123"


async def test_hit_skips_compute():
    store = InMemoryCacheStore()
    await store.put("cardData_b", [{"displayName": "cached"}], expiration_ttl=60)
    compute = CountingCompute([{"displayName": "fresh"}])

    result = await CacheGateway(store).get_or_compute("cardData_b", 60, compute)

    assert result == [{"displayName": "cached"}]
    assert compute.calls == 0


async def test_empty_list_is_a_hit():
    store = InMemoryCacheStore()
    await store.put("k", [], expiration_ttl=60)
    compute = CountingCompute([1])
    assert await CacheGateway(store).get_or_compute("k", 60, compute) == []
    assert compute.calls == 0


async def test_miss_computes_and_stores():
    store = InMemoryCacheStore()
    compute = CountingCompute([{"displayName": "fresh"}])
    gateway = CacheGateway(store)

    assert await gateway.get_or_compute("k", 60, compute) == [{"displayName": "fresh"}]
    assert await gateway.get_or_compute("k", 60, compute) == [{"displayName": "fresh"}]
    assert compute.calls == 1
    assert await store.get("k") == [{"displayName": "fresh"}]


@pytest.mark.parametrize("stored", ["a string", 42, True])
async def test_non_object_entry_is_a_miss(stored):
    store = InMemoryCacheStore()
    await store.put("k", stored, expiration_ttl=60)
    compute = CountingCompute({"ok": True})
    assert await CacheGateway(store).get_or_compute("k", 60, compute) == {"ok": True}
    assert compute.calls == 1


async def test_expired_entry_recomputes():
    clock = FakeClock()
    store = InMemoryCacheStore(clock=clock)
    compute = CountingCompute(["v"])
    gateway = CacheGateway(store)

    await gateway.get_or_compute("k", 60, compute)
    clock.now += 59
    await gateway.get_or_compute("k", 60, compute)
    assert compute.calls == 1

    clock.now += 1
    await gateway.get_or_compute("k", 60, compute)
    assert compute.calls == 2


async def test_compute_failure_stores_nothing():
    store = InMemoryCacheStore()

    async def failing():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        await CacheGateway(store).get_or_compute("k", 60, failing)
    assert await store.get("k") is None


async def test_concurrent_misses_recompute_without_coalescing():
    compute = CountingCompute(["v"], delay=0.01)
    gateway = CacheGateway(InMemoryCacheStore())
    results = await asyncio.gather(*(gateway.get_or_compute("k", 60, compute) for _ in range(3)))
    assert results == [["v"]] * 3
    assert compute.calls == 3


async def test_concurrent_misses_share_one_computation_when_coalescing():
    compute = CountingCompute(["v"], delay=0.01)
    gateway = CacheGateway(InMemoryCacheStore(), coalesce=True)
    results = await asyncio.gather(*(gateway.get_or_compute("k", 60, compute) for _ in range(3)))
    assert results == [["v"]] * 3
    assert compute.calls == 1
    assert gateway._in_flight == {}


async def test_coalesced_failure_reaches_every_waiter():
    gateway = CacheGateway(InMemoryCacheStore(), coalesce=True)

    async def failing():
        await asyncio.sleep(0.01)
        raise RuntimeError("upstream down")

    results = await asyncio.gather(
        *(gateway.get_or_compute("k", 60, failing) for _ in range(2)), return_exceptions=True
    )
    assert all(isinstance(r, RuntimeError) for r in results)
    assert gateway._in_flight == {}
