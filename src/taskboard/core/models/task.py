"""Task Domain Model + 请求模型 + 校验

Task 是唯一的实体；id 由存储层生成，创建后不可变。
请求模型字段保持宽松类型，枚举取值由 validate_* 函数统一校验，
以便返回确定的错误消息（而非 Pydantic 的 422 明细）。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..exceptions import TaskValidationError
from .enums import VALID_PRIORITIES, VALID_STATUSES, TaskPriority, TaskStatus

TITLE_REQUIRED = "title is required"
TITLE_EMPTY = "title must not be empty"
INVALID_PRIORITY = "priority must be low, medium, or high"
INVALID_STATUS = "status must be todo, in_progress, or done"


class Task(BaseModel):
    """Task 数据模型"""

    id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题，不可为空")
    description: str = Field(default="", description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    created_at: datetime = Field(description="创建时间（UTC）")
    updated_at: datetime = Field(description="更新时间（UTC）")


class CreateTaskRequest(BaseModel):
    """创建任务请求体"""

    title: str | None = Field(default=None, description="任务标题（必填）")
    description: str | None = Field(default=None, description="任务描述")
    priority: str | None = Field(default=None, description="优先级，缺省为 medium")


class UpdateTaskRequest(BaseModel):
    """更新任务请求体 -- 仅覆盖出现（且非 null）的字段"""

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None

    def changes(self) -> dict[str, str]:
        """返回需要写入的字段"""
        return self.model_dump(exclude_none=True)


def validate_create_request(req: CreateTaskRequest) -> CreateTaskRequest:
    """校验创建请求，返回补全默认值后的副本

    Raises:
        TaskValidationError: title 为空或 priority 非法
    """
    # null 与缺省等价，按空串处理
    if not req.title:
        raise TaskValidationError(TITLE_REQUIRED)
    priority = req.priority or TaskPriority.MEDIUM.value
    if priority not in VALID_PRIORITIES:
        raise TaskValidationError(INVALID_PRIORITY)
    return req.model_copy(
        update={"description": req.description or "", "priority": priority}
    )


def validate_update_request(req: UpdateTaskRequest) -> UpdateTaskRequest:
    """校验更新请求中出现的字段

    Raises:
        TaskValidationError: title 为空串，或 status / priority 非法
    """
    if req.title is not None and not req.title:
        raise TaskValidationError(TITLE_EMPTY)
    if req.status is not None and req.status not in VALID_STATUSES:
        raise TaskValidationError(INVALID_STATUS)
    if req.priority is not None and req.priority not in VALID_PRIORITIES:
        raise TaskValidationError(INVALID_PRIORITY)
    return req
