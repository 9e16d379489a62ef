"""RedisTaskCache -- 基于 redis.asyncio 的任务缓存

缓存永远不是事实来源：所有读取失败（key 不存在、过期、反序列化失败、
传输错误）对调用方一律视为未命中；写入/删除失败只记录警告。
"""

import redis.asyncio as redis
import structlog
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from .models.task import Task

log = structlog.get_logger()

LIST_KEY = "tasks:list"
DEFAULT_TTL_S = 300

_task_list_adapter = TypeAdapter(list[Task])


def task_key(task_id: str) -> str:
    """单条任务的缓存 key"""
    return f"task:{task_id}"


class RedisTaskCache:
    """TaskCache 的 Redis 实现"""

    def __init__(self, client: redis.Redis, ttl_s: int = DEFAULT_TTL_S) -> None:
        """
        Args:
            client: redis.asyncio 客户端
            ttl_s: 缓存过期时间（秒）
        """
        self._client = client
        self._ttl_s = ttl_s

    @property
    def ttl_s(self) -> int:
        return self._ttl_s

    async def get(self, task_id: str) -> Task | None:
        key = task_key(task_id)
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            log.warning("cache_get_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return Task.model_validate_json(raw)
        except ValidationError:
            log.warning("cache_entry_corrupt", key=key)
            return None

    async def set(self, task: Task) -> None:
        key = task_key(task.id)
        try:
            await self._client.set(key, task.model_dump_json(), ex=self._ttl_s)
        except RedisError as e:
            log.warning("cache_set_failed", key=key, error=str(e))

    async def delete(self, task_id: str) -> None:
        await self._delete(task_key(task_id))

    async def invalidate_list(self) -> None:
        await self._delete(LIST_KEY)

    async def get_list(self) -> list[Task] | None:
        try:
            raw = await self._client.get(LIST_KEY)
        except RedisError as e:
            log.warning("cache_get_failed", key=LIST_KEY, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return _task_list_adapter.validate_json(raw)
        except ValidationError:
            log.warning("cache_entry_corrupt", key=LIST_KEY)
            return None

    async def set_list(self, tasks: list[Task]) -> None:
        try:
            await self._client.set(
                LIST_KEY,
                _task_list_adapter.dump_json(tasks),
                ex=self._ttl_s,
            )
        except RedisError as e:
            log.warning("cache_set_failed", key=LIST_KEY, error=str(e))

    async def ping(self) -> bool:
        """连通性检查，不抛出异常"""
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            log.warning("cache_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()

    async def _delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as e:
            log.warning("cache_delete_failed", key=key, error=str(e))


async def create_redis_cache(
    redis_url: str,
    ttl_s: int = DEFAULT_TTL_S,
) -> RedisTaskCache | None:
    """连接 Redis 并验证可用性

    Redis 不可用时返回 None，服务以无缓存模式运行。
    """
    try:
        client = redis.from_url(redis_url)
    except ValueError as e:
        log.warning("redis_unavailable", reason="invalid_url", error=str(e))
        return None
    try:
        await client.ping()
    except RedisError as e:
        log.warning("redis_unavailable", error=str(e))
        await client.aclose()
        return None
    log.info("redis_connected", ttl_s=ttl_s)
    return RedisTaskCache(client, ttl_s)
