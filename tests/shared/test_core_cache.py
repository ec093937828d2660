import asyncio

import pytest

from storefront.shared.core_cache import (
    InMemoryCacheBackend,
    KeyValueStore,
    RedisCacheBackend,
    build_backend,
)
from storefront.shared.exceptions import UpstreamUnavailable
from tests.fakes import FlakyBackend


@pytest.mark.asyncio
class TestKeyValueStore:
    async def test_round_trips_json_values(self):
        store = KeyValueStore(InMemoryCacheBackend())
        await store.set_with_expiry("product-1", 60, {"id": 1, "tags": ["a"]})
        assert await store.get("product-1") == {"id": 1, "tags": ["a"]}

    async def test_missing_key_is_none(self):
        store = KeyValueStore(InMemoryCacheBackend())
        assert await store.get("nope") is None

    async def test_expired_entry_is_gone(self):
        backend = InMemoryCacheBackend()
        store = KeyValueStore(backend)
        await store.set_with_expiry("k", 60, "v")
        backend._cache["k"].expires_at = backend._cache["k"].expires_at.replace(year=2000)
        assert await store.get("k") is None

    async def test_no_expiry_entry_has_no_deadline(self):
        backend = InMemoryCacheBackend()
        store = KeyValueStore(backend)
        await store.set_no_expiry("all-products", [])
        assert backend._cache["all-products"].expires_at is None
        assert await store.get("all-products") == []

    async def test_undecodable_entry_reads_as_miss(self):
        backend = InMemoryCacheBackend()
        store = KeyValueStore(backend)
        await backend.set("k", b"{not json", None)
        assert await store.get("k") is None

    async def test_delete_counts_existing_keys(self):
        store = KeyValueStore(InMemoryCacheBackend())
        await store.set_with_expiry("a", 60, 1)
        assert await store.delete(["a", "b"]) == 1
        assert await store.delete([]) == 0

    async def test_backend_error_becomes_upstream_unavailable(self):
        backend = FlakyBackend()
        backend.fail_reads = True
        store = KeyValueStore(backend)
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await store.get("k")
        assert exc_info.value.operation == "get"

    async def test_slow_backend_times_out(self):
        backend = FlakyBackend()
        backend.delay_seconds = 0.5
        store = KeyValueStore(backend, timeout_seconds=0.01)
        with pytest.raises(UpstreamUnavailable) as exc_info:
            await store.get("k")
        assert isinstance(exc_info.value.original_error, asyncio.TimeoutError)

    async def test_set_index_drains_once(self):
        store = KeyValueStore(InMemoryCacheBackend())
        await store.add_to_set("listing-keys", "products-a")
        await store.add_to_set("listing-keys", "products-b")
        assert await store.drain_set("listing-keys") == {"products-a", "products-b"}
        assert await store.drain_set("listing-keys") == set()

    async def test_unconnected_redis_backend_is_unavailable(self):
        store = KeyValueStore(RedisCacheBackend("redis://localhost:6379/0"))
        with pytest.raises(UpstreamUnavailable):
            await store.get("k")


def test_build_backend_selects_by_name():
    assert isinstance(build_backend("memory"), InMemoryCacheBackend)
    assert isinstance(build_backend("redis"), RedisCacheBackend)
    with pytest.raises(ValueError):
        build_backend("memcached")


@pytest.mark.asyncio
async def test_counters_start_at_zero_and_increment():
    store = KeyValueStore(InMemoryCacheBackend())
    assert await store.get_counter("cache-generation") == 0
    assert await store.incr("cache-generation") == 1
    assert await store.incr("cache-generation") == 2
    assert await store.get_counter("cache-generation") == 2
