"""TaskService -- 任务增删改查编排

每个请求的处理顺序：
1. Create / Update 先校验请求
2. 读路径先查缓存，未命中回源存储后 best-effort 回填
3. 写路径先落盘，成功后再失效缓存、再发布事件

存储失败直接向上抛出，此时不触碰缓存也不发布事件；
缓存与事件步骤的任何异常只记录警告，绝不回滚已成功的写入。
"""

import structlog
from taskboard.core.models import (
    CreateTaskRequest,
    EventType,
    Task,
    UpdateTaskRequest,
    validate_create_request,
    validate_update_request,
)
from taskboard.core.protocols import EventPublisher, TaskCache, TaskStore

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store: TaskStore,
        cache: TaskCache | None = None,
        publisher: EventPublisher | None = None,
        cache_list: bool = False,
    ) -> None:
        """
        Args:
            store: 任务存储（事实来源）
            cache: 可选缓存，None 表示无缓存模式
            publisher: 可选事件发布器，None 表示不发布事件
            cache_list: 是否对任务列表做读穿透缓存
        """
        self._store = store
        self._cache = cache
        self._publisher = publisher
        self._cache_list = cache_list

    async def list_tasks(self) -> list[Task]:
        """查询任务列表"""
        if self._cache is not None and self._cache_list:
            cached = await self._cache_call("get_list")
            if cached is not None:
                return cached
            tasks = await self._store.list_tasks()
            await self._cache_call("set_list", tasks)
            return tasks
        return await self._store.list_tasks()

    async def get_task(self, task_id: str) -> Task:
        """查询任务详情（缓存读穿透）

        Raises:
            TaskNotFoundError: 任务不存在
        """
        if self._cache is not None:
            cached = await self._cache_call("get", task_id)
            if cached is not None:
                return cached

        task = await self._store.get_task(task_id)

        if self._cache is not None:
            await self._cache_call("set", task)
        return task

    async def create_task(self, req: CreateTaskRequest) -> Task:
        """创建任务

        Raises:
            TaskValidationError: 请求参数非法
        """
        req = validate_create_request(req)
        task = await self._store.create_task(req)
        log.info("task_created", task_id=task.id, priority=task.priority.value)

        if self._cache is not None:
            await self._cache_call("invalidate_list")
        self._publish(EventType.TASK_CREATED, task.id, task)
        return task

    async def update_task(self, task_id: str, req: UpdateTaskRequest) -> Task:
        """部分更新任务

        Raises:
            TaskValidationError: 请求参数非法
            TaskNotFoundError: 任务不存在
        """
        req = validate_update_request(req)
        task = await self._store.update_task(task_id, req)
        log.info("task_updated", task_id=task_id, fields=sorted(req.changes()))

        if self._cache is not None:
            await self._cache_call("delete", task_id)
            await self._cache_call("invalidate_list")
        self._publish(EventType.TASK_UPDATED, task_id, task)
        return task

    async def delete_task(self, task_id: str) -> None:
        """删除任务

        Raises:
            TaskNotFoundError: 任务不存在
        """
        await self._store.delete_task(task_id)
        log.info("task_deleted", task_id=task_id)

        if self._cache is not None:
            await self._cache_call("delete", task_id)
            await self._cache_call("invalidate_list")
        self._publish(EventType.TASK_DELETED, task_id, None)

    async def _cache_call(self, op: str, *args):
        """调用缓存操作；任何异常视为降级，返回 None"""
        try:
            return await getattr(self._cache, op)(*args)
        except Exception as e:
            log.warning(
                "cache_degraded",
                op=op,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

    def _publish(self, event_type: EventType, task_id: str, data: Task | None) -> None:
        if self._publisher is None:
            return
        try:
            self._publisher.publish_event(event_type, task_id, data)
        except Exception as e:
            log.warning(
                "event_publish_degraded",
                type=event_type.value,
                task_id=task_id,
                error_type=type(e).__name__,
                error=str(e),
            )
