"""TraceMiddleware -- 任务级日志上下文

从 /api/tasks/{task_id} 路径中提取 task_id 绑定到 structlog contextvars，
使同一任务的请求日志可以按 task_id 聚合。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_TASKS_PREFIX = "/api/tasks/"


def extract_task_id(path: str) -> str | None:
    """从请求路径中提取 task_id，列表路径返回 None"""
    if not path.startswith(_TASKS_PREFIX):
        return None
    task_id = path[len(_TASKS_PREFIX) :].strip("/")
    if not task_id or "/" in task_id:
        return None
    return task_id


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件 -- 绑定 task_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
