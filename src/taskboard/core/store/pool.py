"""SqlitePool -- aiosqlite 连接池

按需创建连接，总数不超过 max_size；超出上限的调用方在 acquire 处排队等待。
每次操作独占一个连接并自行提交/回滚，保证并发请求之间不共享事务。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from .sqlite_init import configure_connection


class SqlitePool:
    """aiosqlite 连接池"""

    def __init__(self, db_path: str, max_size: int = 20) -> None:
        """
        Args:
            db_path: SQLite 数据库文件路径
            max_size: 最大连接数，同时也是并发数据库操作上限
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._db_path = db_path
        self._max_size = max_size
        self._slots = asyncio.Semaphore(max_size)
        self._idle: list[aiosqlite.Connection] = []
        self._opened = 0
        self._closed = False

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def size(self) -> int:
        """当前已打开的连接数"""
        return self._opened

    @property
    def closed(self) -> bool:
        return self._closed

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self._db_path)
        conn.row_factory = aiosqlite.Row
        await configure_connection(conn)
        self._opened += 1
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """借出一个连接，退出上下文时归还"""
        if self._closed:
            raise aiosqlite.OperationalError("connection pool is closed")
        async with self._slots:
            if self._closed:
                raise aiosqlite.OperationalError("connection pool is closed")
            conn = self._idle.pop() if self._idle else await self._connect()
            try:
                yield conn
            finally:
                # 被取消的写操作可能留下未结束的事务，归还前回滚
                if conn.in_transaction:
                    await conn.rollback()
                if self._closed:
                    await conn.close()
                    self._opened -= 1
                else:
                    self._idle.append(conn)

    async def close(self) -> None:
        """关闭所有空闲连接；借出中的连接在归还时关闭"""
        self._closed = True
        idle, self._idle = self._idle, []
        for conn in idle:
            await conn.close()
            self._opened -= 1


async def open_pool(db_path: str, max_size: int = 20) -> SqlitePool:
    """创建连接池（确保数据库目录存在）"""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return SqlitePool(db_path, max_size)
