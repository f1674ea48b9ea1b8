import logging

import pytest

from services.cache import CacheClient


@pytest.mark.asyncio
async def test_set_then_get_round_trips_json(cache, fake_redis):
    assert await cache.set("songs?page=1&limit=10", {"data": [{"id": "1"}]})

    assert await cache.get("songs?page=1&limit=10") == {"data": [{"id": "1"}]}
    assert fake_redis.ttls["songs?page=1&limit=10"] == 300


@pytest.mark.asyncio
async def test_explicit_ttl_wins(cache, fake_redis):
    await cache.set("k", 1, ttl=10)
    assert fake_redis.ttls["k"] == 10


@pytest.mark.asyncio
async def test_miss_returns_none(cache):
    assert await cache.get("missing") is None


@pytest.mark.asyncio
async def test_outage_is_a_miss(cache, fake_redis, caplog):
    fake_redis.down = True

    with caplog.at_level(logging.WARNING, logger="services.cache"):
        assert await cache.get("k") is None
        assert await cache.set("k", {"a": 1}) is False
        await cache.delete("k")

    assert "Cache read failed" in caplog.text
    assert "Cache write failed" in caplog.text


@pytest.mark.asyncio
async def test_unreadable_entry_is_a_miss(fake_redis):
    fake_redis.data["k"] = "{not json"
    cache = CacheClient(fake_redis)

    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_delete_evicts(cache, fake_redis):
    await cache.set("k", [1, 2])
    await cache.delete("k")
    assert "k" not in fake_redis.data
