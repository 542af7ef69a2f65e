"""
课程缓存层测试
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from coursegraph.services.common_cache import SimpleCache


@pytest.fixture
def redis_client():
    """模拟redis.asyncio客户端"""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.mark.asyncio
class TestSimpleCache:
    """SimpleCache测试类"""

    async def test_keys_are_prefixed(self, redis_client):
        cache = SimpleCache(redis_client, key_prefix="course:")

        await cache.set("detail:course_1", {"course_id": "course_1"}, ttl=60)
        await cache.delete("published")

        redis_client.setex.assert_called_once_with("course:detail:course_1", 60, json.dumps({"course_id": "course_1"}))
        redis_client.delete.assert_called_once_with("course:published")

    async def test_get_decodes_json(self, redis_client):
        redis_client.get.return_value = json.dumps([{"course_id": "course_1", "price": "299.00"}])
        cache = SimpleCache(redis_client, key_prefix="course:")

        assert await cache.get("published") == [{"course_id": "course_1", "price": "299.00"}]

    async def test_miss_returns_none(self, redis_client):
        cache = SimpleCache(redis_client)

        assert await cache.get("published") is None

    async def test_redis_errors_are_misses(self, redis_client):
        """Redis故障时按未命中处理，不影响主流程"""
        redis_client.get.side_effect = ConnectionError("redis down")
        redis_client.setex.side_effect = ConnectionError("redis down")
        cache = SimpleCache(redis_client)

        assert await cache.get("published") is None
        assert await cache.set("published", []) is False

    async def test_uninitialized_cache(self):
        cache = SimpleCache()

        assert await cache.get("published") is None
        assert await cache.set("published", []) is False
        assert await cache.delete("published") is False
        assert await cache.delete_pattern("detail:*") == 0

    async def test_init_with_shared_pool(self, redis_client):
        cache = SimpleCache(key_prefix="course:")

        await cache.init_redis(redis_client)

        assert cache.redis_client is redis_client
        redis_client.ping.assert_called_once()

    async def test_delete_pattern(self, redis_client):
        async def scan_iter(match):
            for key in ("course:detail:1", "course:detail:2"):
                yield key

        redis_client.scan_iter = MagicMock(side_effect=scan_iter)
        redis_client.delete.return_value = 2
        cache = SimpleCache(redis_client, key_prefix="course:")

        assert await cache.delete_pattern("detail:*") == 2
        redis_client.scan_iter.assert_called_once_with(match="course:detail:*")
        redis_client.delete.assert_called_once_with("course:detail:1", "course:detail:2")
