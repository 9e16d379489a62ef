"""TaskStore SQLite 实现

tasks 表是唯一的事实来源。Update 为读-改-写，
同一任务的并发更新不做互斥（后写覆盖，可能丢失部分字段）。
"""

from datetime import UTC, datetime, timedelta

import aiosqlite
from ulid import ULID

from ..exceptions import TaskNotFoundError
from ..models.enums import TaskStatus
from ..models.task import CreateTaskRequest, Task, UpdateTaskRequest
from .pool import SqlitePool

_COLUMNS = "id, title, description, status, priority, created_at, updated_at"


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, pool: SqlitePool) -> None:
        self._pool = pool

    @property
    def pool(self) -> SqlitePool:
        return self._pool

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 倒序"""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at DESC, id DESC"
            )
            rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def get_task(self, task_id: str) -> Task:
        """根据 id 查询任务

        Raises:
            TaskNotFoundError: 任务不存在
        """
        async with self._pool.acquire() as conn:
            return await self._fetch(conn, task_id)

    async def create_task(self, req: CreateTaskRequest) -> Task:
        """创建任务记录（调用方需先完成校验）"""
        now = datetime.now(UTC)
        task = Task(
            id=str(ULID()),
            title=req.title,
            description=req.description or "",
            status=TaskStatus.TODO,
            priority=req.priority,
            created_at=now,
            updated_at=now,
        )
        async with self._pool.acquire() as conn:
            try:
                await conn.execute(
                    f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        task.id,
                        task.title,
                        task.description,
                        task.status.value,
                        task.priority.value,
                        task.created_at.isoformat(),
                        task.updated_at.isoformat(),
                    ),
                )
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        return task

    async def update_task(self, task_id: str, req: UpdateTaskRequest) -> Task:
        """部分更新任务：仅覆盖请求中出现的字段

        updated_at 严格递增，即使时钟精度不足也不会与上一次相同。

        Raises:
            TaskNotFoundError: 任务不存在
        """
        async with self._pool.acquire() as conn:
            existing = await self._fetch(conn, task_id)
            now = max(
                datetime.now(UTC),
                existing.updated_at + timedelta(microseconds=1),
            )
            updated = Task.model_validate(
                {**existing.model_dump(), **req.changes(), "updated_at": now}
            )
            try:
                await conn.execute(
                    """
                    UPDATE tasks
                    SET title = ?, description = ?, status = ?, priority = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        updated.title,
                        updated.description,
                        updated.status.value,
                        updated.priority.value,
                        updated.updated_at.isoformat(),
                        task_id,
                    ),
                )
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        return updated

    async def delete_task(self, task_id: str) -> None:
        """删除任务

        Raises:
            TaskNotFoundError: 没有行被删除
        """
        async with self._pool.acquire() as conn:
            try:
                cursor = await conn.execute(
                    "DELETE FROM tasks WHERE id = ?",
                    (task_id,),
                )
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)

    async def ping(self) -> None:
        """连通性检查，失败时抛出原始异常"""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            await cursor.fetchone()

    async def close(self) -> None:
        await self._pool.close()

    async def _fetch(self, conn: aiosqlite.Connection, task_id: str) -> Task:
        cursor = await conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._row_to_task(row)

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=row["status"],
            priority=row["priority"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
