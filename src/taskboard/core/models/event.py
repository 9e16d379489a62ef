"""TaskEvent -- 任务变更通知

timestamp 在发布时由服务端打点；删除事件不携带 data。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from .enums import EventType
from .task import Task


class TaskEvent(BaseModel):
    """TaskEvent 数据模型"""

    type: EventType = Field(description="事件类型")
    task_id: str = Field(description="关联的 Task ID，同时作为消息 key")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="发布时间（UTC）",
    )
    data: Task | None = Field(default=None, description="变更后的 Task，删除时为空")

    def to_message(self) -> bytes:
        """序列化为消息体（省略空 data）"""
        return self.model_dump_json(exclude_none=True).encode("utf-8")
