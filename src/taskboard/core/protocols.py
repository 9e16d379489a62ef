"""协作方 Protocol 接口定义

定义 TaskStore、TaskCache、EventPublisher 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
TaskCache 与 EventPublisher 均为可选依赖：调用方以 None 表示永久降级。
"""

from typing import Protocol

from .models.enums import EventType
from .models.task import CreateTaskRequest, Task, UpdateTaskRequest


class TaskStore(Protocol):
    """Task 存储接口（事实来源）"""

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 倒序"""
        ...

    async def get_task(self, task_id: str) -> Task:
        """查询任务，不存在时抛出 TaskNotFoundError"""
        ...

    async def create_task(self, req: CreateTaskRequest) -> Task:
        """创建任务并落盘"""
        ...

    async def update_task(self, task_id: str, req: UpdateTaskRequest) -> Task:
        """部分更新任务，不存在时抛出 TaskNotFoundError"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """删除任务，不存在时抛出 TaskNotFoundError"""
        ...

    async def ping(self) -> None:
        """连通性检查"""
        ...


class TaskCache(Protocol):
    """Task 缓存接口 -- 全部操作 best-effort"""

    async def get(self, task_id: str) -> Task | None:
        """读取缓存，未命中（含过期、传输错误）返回 None"""
        ...

    async def set(self, task: Task) -> None:
        """写入缓存（带 TTL）"""
        ...

    async def delete(self, task_id: str) -> None:
        """删除单条缓存"""
        ...

    async def invalidate_list(self) -> None:
        """删除任务列表缓存"""
        ...

    async def get_list(self) -> list[Task] | None:
        """读取任务列表缓存"""
        ...

    async def set_list(self, tasks: list[Task]) -> None:
        """写入任务列表缓存"""
        ...


class EventPublisher(Protocol):
    """事件发布接口 -- fire-and-forget"""

    def publish_event(
        self,
        event_type: EventType,
        task_id: str,
        data: Task | None = None,
    ) -> None:
        """提交事件，不等待投递结果"""
        ...
