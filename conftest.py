"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from taskboard.core.store import SqliteTaskStore, create_task_store


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def task_store(tmp_db_path: Path) -> AsyncGenerator[SqliteTaskStore, None]:
    """提供已初始化 schema 的临时 TaskStore"""
    store = await create_task_store(str(tmp_db_path), pool_size=4)
    yield store
    await store.close()
