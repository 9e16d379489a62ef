"""TaskboardConfig -- 服务配置加载

从环境变量加载配置。Redis / Kafka 地址为空时对应组件整体禁用（降级运行）。
数值类配置解析失败或越界（< 1）时记录警告并使用默认值，不阻塞启动。
"""

import os

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

_SQLITE_URL_PREFIX = "sqlite:///"
DEFAULT_DB_PATH = os.path.join("data", "sqlite", "taskboard.db")


class TaskboardConfig(BaseModel):
    """Taskboard 配置 -- 从环境变量加载

    环境变量:
        DATABASE_URL / TASKBOARD_DB_PATH: SQLite 数据库（sqlite:///path 或文件路径）
        TASKBOARD_DB_POOL_SIZE: 连接池上限（默认 20）
        REDIS_URL: Redis 地址，为空则禁用缓存
        TASKBOARD_CACHE_TTL_S: 缓存过期时间（秒，默认 300）
        TASKBOARD_CACHE_LIST: 是否缓存任务列表（默认 false）
        KAFKA_BROKERS: Kafka 地址，为空则禁用事件发布
        KAFKA_TOPIC: 事件 topic（默认 task-events）
        TASKBOARD_EVENT_QUEUE_SIZE: 事件待发送队列上限（默认 1000）
        TASKBOARD_CORS_ORIGINS: 允许的跨域来源，逗号分隔（默认 *）
    """

    db_path: str = Field(default=DEFAULT_DB_PATH, description="SQLite 数据库文件路径")
    db_pool_size: int = Field(default=20, ge=1, description="数据库连接池上限")
    redis_url: str | None = Field(default=None, description="Redis 连接串")
    cache_ttl_s: int = Field(default=300, ge=1, description="缓存过期时间（秒）")
    cache_list: bool = Field(default=False, description="是否缓存任务列表")
    kafka_brokers: str | None = Field(default=None, description="Kafka broker 地址")
    kafka_topic: str = Field(default="task-events", description="事件 topic")
    event_queue_size: int = Field(default=1000, ge=1, description="事件队列上限")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="CORS 来源")


def parse_database_url(url: str) -> str:
    """将 sqlite:///path 形式的连接串转换为文件路径，普通路径原样返回"""
    if url.startswith(_SQLITE_URL_PREFIX):
        return url[len(_SQLITE_URL_PREFIX) :]
    return url


def _int_from_env(name: str, default: int, minimum: int = 1) -> int | None:
    val = os.environ.get(name)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        parsed = None
    if parsed is None or parsed < minimum:
        log.warning(
            "invalid_int_config",
            env_var=name,
            value=val,
            fallback=default,
        )
        return None
    return parsed


def load_config() -> TaskboardConfig:
    """从环境变量加载 Taskboard 配置

    Returns:
        TaskboardConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("DATABASE_URL"):
        kwargs["db_path"] = parse_database_url(val)
    elif val := os.environ.get("TASKBOARD_DB_PATH"):
        kwargs["db_path"] = val

    if (pool_size := _int_from_env("TASKBOARD_DB_POOL_SIZE", 20)) is not None:
        kwargs["db_pool_size"] = pool_size

    if val := os.environ.get("REDIS_URL"):
        kwargs["redis_url"] = val

    if (ttl := _int_from_env("TASKBOARD_CACHE_TTL_S", 300)) is not None:
        kwargs["cache_ttl_s"] = ttl

    if val := os.environ.get("TASKBOARD_CACHE_LIST"):
        kwargs["cache_list"] = val.strip().lower() in ("1", "true", "yes", "on")

    if val := os.environ.get("KAFKA_BROKERS"):
        kwargs["kafka_brokers"] = val

    if val := os.environ.get("KAFKA_TOPIC"):
        kwargs["kafka_topic"] = val

    if (queue_size := _int_from_env("TASKBOARD_EVENT_QUEUE_SIZE", 1000)) is not None:
        kwargs["event_queue_size"] = queue_size

    if val := os.environ.get("TASKBOARD_CORS_ORIGINS"):
        kwargs["cors_origins"] = [o.strip() for o in val.split(",") if o.strip()]

    return TaskboardConfig(**kwargs)
