"""Taskboard Core Store -- SQLite 持久化实现

提供工厂函数创建基于连接池的 TaskStore，并在创建时执行幂等的建表步骤。
"""

from .pool import SqlitePool, open_pool
from .sqlite_init import init_db, verify_wal_mode
from .task_store import SqliteTaskStore


async def create_task_store(db_path: str, pool_size: int = 20) -> SqliteTaskStore:
    """创建 TaskStore 并初始化 schema

    Args:
        db_path: SQLite 数据库文件路径
        pool_size: 连接池上限

    Returns:
        SqliteTaskStore 实例
    """
    pool = await open_pool(db_path, pool_size)
    async with pool.acquire() as conn:
        await init_db(conn)
    return SqliteTaskStore(pool)


__all__ = [
    "SqlitePool",
    "SqliteTaskStore",
    "create_task_store",
    "init_db",
    "open_pool",
    "verify_wal_mode",
]
