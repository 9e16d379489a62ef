"""任务 CRUD 路由

GET    /api/tasks[/]:    任务列表，按 created_at 倒序
POST   /api/tasks[/]:    创建任务，201
GET    /api/tasks/{id}:  任务详情
PUT    /api/tasks/{id}:  部分更新任务
DELETE /api/tasks/{id}:  删除任务，204

错误响应统一为 {"error": "<message>"}；存储层的非预期异常只记录日志，
对外返回通用消息，不泄露内部细节。
"""

import structlog
from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse, Response
from taskboard.core.exceptions import TaskNotFoundError, TaskValidationError
from taskboard.core.models import CreateTaskRequest, Task, UpdateTaskRequest

from ..deps import get_task_service
from ..services.task_service import TaskService

log = structlog.get_logger()

router = APIRouter(prefix="/api/tasks")

NOT_FOUND_MESSAGE = "task not found"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("", response_model=list[Task], include_in_schema=False)
@router.get("/", response_model=list[Task])
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """查询任务列表"""
    try:
        return await service.list_tasks()
    except Exception:
        log.exception("list_tasks_failed")
        return error_response(500, "failed to list tasks")


@router.post("", response_model=Task, status_code=201, include_in_schema=False)
@router.post("/", response_model=Task, status_code=201)
async def create_task(
    body: CreateTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    """创建任务"""
    try:
        return await service.create_task(body)
    except TaskValidationError as e:
        return error_response(400, e.message)
    except Exception:
        log.exception("create_task_failed")
        return error_response(500, "failed to create task")


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询任务详情"""
    try:
        return await service.get_task(task_id)
    except TaskNotFoundError:
        return error_response(404, NOT_FOUND_MESSAGE)
    except Exception:
        log.exception("get_task_failed", task_id=task_id)
        return error_response(500, "failed to get task")


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    body: UpdateTaskRequest,
    service: TaskService = Depends(get_task_service),
):
    """部分更新任务：仅覆盖请求体中出现的字段"""
    try:
        return await service.update_task(task_id, body)
    except TaskValidationError as e:
        return error_response(400, e.message)
    except TaskNotFoundError:
        return error_response(404, NOT_FOUND_MESSAGE)
    except Exception:
        log.exception("update_task_failed", task_id=task_id)
        return error_response(500, "failed to update task")


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """删除任务"""
    try:
        await service.delete_task(task_id)
    except TaskNotFoundError:
        return error_response(404, NOT_FOUND_MESSAGE)
    except Exception:
        log.exception("delete_task_failed", task_id=task_id)
        return error_response(500, "failed to delete task")
    return Response(status_code=204)
