"""Read-through cache for the achievement summary.

1. First GET is a miss and populates the cache
2. Second GET is a hit and returns the same data
3. A grant invalidates the entry
4. A failing Redis degrades to a miss instead of an error
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from redis.exceptions import ConnectionError as RedisConnectionError

from learning_curve.services.cache import RedisCacheService
from tests.conftest import auth, register


def _cache_ops(operation: str) -> float:
    value = REGISTRY.get_sample_value("cache_operations_total", {"operation": operation})
    return value if value is not None else 0.0


def test_summary_miss_then_hit(client: TestClient) -> None:
    token = register(client)
    misses, hits = _cache_ops("miss"), _cache_ops("hit")

    first = client.get("/v1/achievements/progress", headers=auth(token))
    second = client.get("/v1/achievements/progress", headers=auth(token))

    assert first.json() == second.json()
    assert _cache_ops("miss") - misses == 1
    assert _cache_ops("hit") - hits == 1


def test_summary_entries_are_per_user(client: TestClient) -> None:
    ana = register(client)
    bo = register(client, name="Bo", email="bo@example.com")
    client.put("/v1/progress/modules/101", json={"status": "completed"}, headers=auth(ana))
    client.post("/v1/achievements/check", headers=auth(ana))

    assert client.get("/v1/achievements/progress", headers=auth(ana)).json()["earned"] == 1
    assert client.get("/v1/achievements/progress", headers=auth(bo)).json()["earned"] == 0


class _DownRedis:
    async def get(self, key: str) -> str | None:
        raise RedisConnectionError("connection refused")

    async def setex(self, key: str, ttl: int, value: str) -> None:
        raise RedisConnectionError("connection refused")

    async def delete(self, *keys: str) -> None:
        raise RedisConnectionError("connection refused")


def test_redis_failure_is_a_miss() -> None:
    cache = RedisCacheService(_DownRedis())

    async def _exercise() -> str | None:
        await cache.set("k", "v", 60)
        await cache.delete("k")
        return await cache.get("k")

    assert asyncio.run(_exercise()) is None


class _DictRedis:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)


def test_redis_keys_are_prefixed() -> None:
    fake = _DictRedis()
    cache = RedisCacheService(fake)

    asyncio.run(cache.set("achievements:1:summary", "{}", 300))
    assert list(fake.data) == ["cache:achievements:1:summary"]
    assert asyncio.run(cache.get("achievements:1:summary")) == "{}"
