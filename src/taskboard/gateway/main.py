"""FastAPI 应用主文件

app 创建 + lifespan 管理：Store 初始化/关闭 + 可选 Cache / Publisher 连接 + 路由注册。
Redis 或 Kafka 不可用时服务照常启动，对应能力降级为关闭。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from taskboard.core.cache import create_redis_cache
from taskboard.core.config import TaskboardConfig, load_config
from taskboard.core.publisher import create_kafka_publisher
from taskboard.core.store import create_task_store

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时连接各协作方，关闭时按相反顺序清理"""
    config: TaskboardConfig = app.state.config

    # 数据库（必需）
    app.state.store = await create_task_store(config.db_path, config.db_pool_size)
    log.info("database_ready", db_path=config.db_path, pool_size=config.db_pool_size)

    # Redis（可选）
    app.state.cache = None
    if config.redis_url:
        app.state.cache = await create_redis_cache(config.redis_url, config.cache_ttl_s)
    if app.state.cache is None:
        log.info("cache_disabled")

    # Kafka（可选）：配置了 broker 即创建，连接在后台重试
    app.state.publisher = None
    if config.kafka_brokers:
        app.state.publisher = await create_kafka_publisher(
            config.kafka_brokers,
            config.kafka_topic,
            config.event_queue_size,
        )
    else:
        log.info("events_disabled")

    yield

    log.info("shutting_down")
    if app.state.publisher is not None:
        await app.state.publisher.close()
    if app.state.cache is not None:
        await app.state.cache.close()
    await app.state.store.close()


async def _malformed_payload_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体无法解析或类型不符 -> 400"""
    log.info("malformed_payload", errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "invalid JSON"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底：未捕获异常转换为 500，进程继续运行"""
    log.error("unhandled_exception", error_type=type(exc).__name__, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "internal server error"})


def create_app(config: TaskboardConfig | None = None) -> FastAPI:
    """创建 FastAPI 应用实例"""
    config = config or load_config()

    app = FastAPI(
        title="Taskboard",
        version="0.1.0",
        description="Task CRUD API with optional cache and event publication",
        lifespan=lifespan,
    )
    app.state.config = config

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 位于最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_exception_handler(RequestValidationError, _malformed_payload_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    setup_logging()

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
