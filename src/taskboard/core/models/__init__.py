"""Taskboard Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    VALID_PRIORITIES,
    VALID_STATUSES,
    EventType,
    TaskPriority,
    TaskStatus,
)
from .event import TaskEvent
from .task import (
    CreateTaskRequest,
    Task,
    UpdateTaskRequest,
    validate_create_request,
    validate_update_request,
)

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "EventType",
    "VALID_STATUSES",
    "VALID_PRIORITIES",
    # Task
    "Task",
    "CreateTaskRequest",
    "UpdateTaskRequest",
    # 校验
    "validate_create_request",
    "validate_update_request",
    # Event
    "TaskEvent",
]
