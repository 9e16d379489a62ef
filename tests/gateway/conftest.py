"""gateway 测试配置 -- FastAPI app + httpx AsyncClient + 内存协作方替身

ASGITransport 不会触发 lifespan，fixture 手动组装 app.state。
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskboard.core.config import TaskboardConfig
from taskboard.core.models import EventType, Task
from taskboard.core.store import create_task_store
from taskboard.gateway.main import create_app


class InMemoryTaskCache:
    """TaskCache 替身：记录调用顺序，可模拟故障"""

    def __init__(self) -> None:
        self.entries: dict[str, Task] = {}
        self.list_entry: list[Task] | None = None
        self.calls: list[tuple[str, str | None]] = []
        self.fail = False

    def _record(self, op: str, key: str | None = None) -> None:
        self.calls.append((op, key))
        if self.fail:
            raise ConnectionError("cache unreachable")

    async def get(self, task_id: str) -> Task | None:
        self._record("get", task_id)
        return self.entries.get(task_id)

    async def set(self, task: Task) -> None:
        self._record("set", task.id)
        self.entries[task.id] = task

    async def delete(self, task_id: str) -> None:
        self._record("delete", task_id)
        self.entries.pop(task_id, None)

    async def invalidate_list(self) -> None:
        self._record("invalidate_list")
        self.list_entry = None

    async def get_list(self) -> list[Task] | None:
        self._record("get_list")
        return self.list_entry

    async def set_list(self, tasks: list[Task]) -> None:
        self._record("set_list")
        self.list_entry = list(tasks)

    async def ping(self) -> bool:
        return not self.fail

    async def close(self) -> None:
        pass

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]


class RecordingPublisher:
    """EventPublisher 替身：记录事件，可模拟故障"""

    def __init__(self) -> None:
        self.events: list[tuple[EventType, str, Task | None]] = []
        self.fail = False

    def publish_event(
        self,
        event_type: EventType,
        task_id: str,
        data: Task | None = None,
    ) -> None:
        if self.fail:
            raise RuntimeError("event transport unavailable")
        self.events.append((event_type, task_id, data))

    async def close(self) -> None:
        pass

    def types(self) -> list[str]:
        return [event_type.value for event_type, _, _ in self.events]


@pytest.fixture
def cache() -> InMemoryTaskCache:
    return InMemoryTaskCache()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest_asyncio.fixture
async def test_app(tmp_path: Path):
    """无缓存、无事件发布的 app（cache-disabled 模式）"""
    config = TaskboardConfig(db_path=str(tmp_path / "sqlite" / "test.db"))
    app = create_app(config)

    # 手动初始化（绕过 lifespan）
    app.state.store = await create_task_store(config.db_path, config.db_pool_size)
    app.state.cache = None
    app.state.publisher = None

    yield app

    await app.state.store.close()


@pytest_asyncio.fixture
async def full_app(test_app, cache: InMemoryTaskCache, publisher: RecordingPublisher):
    """挂载了缓存与事件发布替身的 app"""
    test_app.state.cache = cache
    test_app.state.publisher = publisher
    return test_app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient（无缓存模式）"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def full_client(full_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient（缓存 + 事件模式）"""
    async with AsyncClient(
        transport=ASGITransport(app=full_app),
        base_url="http://test",
    ) as ac:
        yield ac
