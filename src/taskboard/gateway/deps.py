"""依赖注入模块 -- 通过 FastAPI Depends 注入 TaskService

Store / Cache / Publisher 实例通过 app.state 管理，在 lifespan 中初始化/清理；
每个请求拿到的是显式传入的引用，而非模块级单例。
"""

from fastapi import Request

from .services.task_service import TaskService


def get_task_service(request: Request) -> TaskService:
    """按 app.state 中的协作方组装 TaskService（cache / publisher 可缺省）"""
    state = request.app.state
    config = getattr(state, "config", None)
    return TaskService(
        store=state.store,
        cache=getattr(state, "cache", None),
        publisher=getattr(state, "publisher", None),
        cache_list=config.cache_list if config is not None else False,
    )
