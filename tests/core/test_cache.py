"""RedisTaskCache 测试

使用 AsyncMock 模拟 redis.asyncio 客户端，验证：
1. key 规则与 TTL
2. 未命中 / 传输错误 / 脏数据一律视为 miss
3. 写入与删除失败不向调用方抛出
4. create_redis_cache 在 Redis 不可用时降级为 None
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import taskboard.core.cache as cache_module
from redis.exceptions import ConnectionError as RedisConnectionError
from taskboard.core.cache import LIST_KEY, RedisTaskCache, create_redis_cache, task_key
from taskboard.core.models import Task


@pytest.fixture
def task() -> Task:
    now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    return Task(
        id="01JCACHE000000000000000001",
        title="Cached",
        priority="high",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


class TestKeys:
    def test_task_key(self):
        assert task_key("abc") == "task:abc"

    def test_list_key(self):
        assert LIST_KEY == "tasks:list"


class TestGet:
    async def test_hit_returns_task(self, client: AsyncMock, task: Task):
        client.get.return_value = task.model_dump_json().encode()
        cache = RedisTaskCache(client)

        assert await cache.get(task.id) == task
        client.get.assert_awaited_once_with(f"task:{task.id}")

    async def test_absent_key_is_miss(self, client: AsyncMock):
        client.get.return_value = None
        assert await RedisTaskCache(client).get("missing") is None

    async def test_transport_error_is_miss(self, client: AsyncMock):
        client.get.side_effect = RedisConnectionError("connection refused")
        assert await RedisTaskCache(client).get("any") is None

    async def test_corrupt_entry_is_miss(self, client: AsyncMock):
        client.get.return_value = b"{not json"
        assert await RedisTaskCache(client).get("any") is None


class TestWrite:
    async def test_set_uses_ttl(self, client: AsyncMock, task: Task):
        cache = RedisTaskCache(client, ttl_s=300)
        await cache.set(task)

        client.set.assert_awaited_once()
        args, kwargs = client.set.call_args
        assert args[0] == f"task:{task.id}"
        assert Task.model_validate_json(args[1]) == task
        assert kwargs["ex"] == 300

    async def test_set_failure_swallowed(self, client: AsyncMock, task: Task):
        client.set.side_effect = RedisConnectionError("down")
        await RedisTaskCache(client).set(task)

    async def test_delete(self, client: AsyncMock):
        await RedisTaskCache(client).delete("abc")
        client.delete.assert_awaited_once_with("task:abc")

    async def test_invalidate_list(self, client: AsyncMock):
        await RedisTaskCache(client).invalidate_list()
        client.delete.assert_awaited_once_with("tasks:list")

    async def test_delete_failure_swallowed(self, client: AsyncMock):
        client.delete.side_effect = RedisConnectionError("down")
        cache = RedisTaskCache(client)
        await cache.delete("abc")
        await cache.invalidate_list()


class TestListCache:
    async def test_list_round_trip(self, client: AsyncMock, task: Task):
        cache = RedisTaskCache(client)
        await cache.set_list([task])
        stored = client.set.call_args.args[1]

        client.get.return_value = stored
        assert await cache.get_list() == [task]
        client.get.assert_awaited_once_with("tasks:list")

    async def test_list_miss(self, client: AsyncMock):
        client.get.return_value = None
        assert await RedisTaskCache(client).get_list() is None


class TestCreateRedisCache:
    async def test_returns_none_when_unreachable(self, monkeypatch):
        fake_client = AsyncMock()
        fake_client.ping.side_effect = RedisConnectionError("refused")
        monkeypatch.setattr(cache_module.redis, "from_url", lambda url: fake_client)

        assert await create_redis_cache("redis://localhost:6379/0") is None
        fake_client.aclose.assert_awaited_once()

    async def test_returns_cache_when_reachable(self, monkeypatch):
        fake_client = AsyncMock()
        fake_client.ping.return_value = True
        monkeypatch.setattr(cache_module.redis, "from_url", lambda url: fake_client)

        cache = await create_redis_cache("redis://localhost:6379/0", ttl_s=60)
        assert isinstance(cache, RedisTaskCache)
        assert cache.ttl_s == 60
        assert await cache.ping() is True
