"""LoggingMiddleware -- 请求级日志

为每个 HTTP 请求生成 request_id，绑定到 structlog contextvars。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件 -- 为每个请求生成 request_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.ainfo("request_started")

        response = await call_next(request)

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
