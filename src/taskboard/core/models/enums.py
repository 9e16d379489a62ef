"""枚举定义

包含 TaskStatus、TaskPriority、EventType 三个枚举。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EventType(StrEnum):
    """任务变更事件类型"""

    TASK_CREATED = "task.created"
    TASK_UPDATED = "task.updated"
    TASK_DELETED = "task.deleted"


VALID_STATUSES: frozenset[str] = frozenset(s.value for s in TaskStatus)
VALID_PRIORITIES: frozenset[str] = frozenset(p.value for p in TaskPriority)
