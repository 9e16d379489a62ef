"""Taskboard 异常体系

校验失败与记录不存在向调用方原样透出；
其余存储层异常保持 aiosqlite 原始类型，由路由层记录并折叠为 500。
"""


class TaskboardError(Exception):
    """Taskboard 基础异常"""


class TaskValidationError(TaskboardError):
    """请求参数校验失败（映射为 400）"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskNotFoundError(TaskboardError):
    """任务不存在（映射为 404）"""

    def __init__(self, task_id: str) -> None:
        """
        Args:
            task_id: 未找到的任务 ID
        """
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id
