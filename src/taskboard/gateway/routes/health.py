"""健康检查路由

GET /health, /healthz: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，数据库必须可用；
            缓存与事件发布是可选依赖，只报告状态，不影响就绪结果。
GET /readyz: 精简版 Readiness，只检查数据库，
             返回 {"status": "ready"} 或 503 {"status": "not ready"}。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
@router.get("/healthz")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查

    检查项：
    1. database: 数据库连通性（失败则 503）
    2. cache: ok / unreachable / disabled
    3. events: enabled / disabled
    """
    state = request.app.state
    checks: dict[str, str] = {}
    all_ok = True

    # 1. 数据库连通性
    try:
        await state.store.ping()
        checks["database"] = "ok"
    except Exception as e:
        log.warning("readiness_database_failed", error_type=type(e).__name__)
        checks["database"] = "unavailable"
        all_ok = False

    # 2. 缓存（可选）
    cache = getattr(state, "cache", None)
    if cache is None:
        checks["cache"] = "disabled"
    else:
        checks["cache"] = "ok" if await cache.ping() else "unreachable"

    # 3. 事件发布（可选）
    publisher = getattr(state, "publisher", None)
    checks["events"] = "disabled" if publisher is None else "enabled"

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )


@router.get("/readyz")
async def readyz(request: Request):
    """精简版 Readiness 检查 -- 仅以数据库连通性为准"""
    try:
        await request.app.state.store.ping()
    except Exception as e:
        log.warning("readiness_database_failed", error_type=type(e).__name__)
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return {"status": "ready"}
