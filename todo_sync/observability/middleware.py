"""
请求观测中间件：trace_id + Todo 上下文绑定、请求日志、HTTP 指标

指标的 endpoint 标签取路由模板（如 /todos、/tools/{name}），
未命中任何路由的请求（404 扫描等）统一记为 "unmatched"，避免标签基数随 URL 无限增长。
/metrics 与 /health 不记录。
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from todo_sync.observability.metrics import REQUEST_DURATION, REQUEST_TOTAL

log = structlog.get_logger()

UNMATCHED_ROUTE = "unmatched"
TRACE_HEADER = "X-Trace-ID"


def route_template(request: Request) -> str:
    """路由匹配后 scope 中带有 route；没有时按应用路由表重新匹配一次"""
    route = request.scope.get("route")
    if route is not None:
        return route.path
    for candidate in request.app.router.routes:
        match, _ = candidate.matches(request.scope)
        if match == Match.FULL:
            return candidate.path
    return UNMATCHED_ROUTE


def _is_ignored(path: str) -> bool:
    return path.startswith("/metrics") or path == "/health"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """每个请求一个 trace_id，日志自动携带 trace_id 与 todo_context"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if _is_ignored(request.url.path):
            return await call_next(request)

        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            trace_id=trace_id,
            todo_context=request.query_params.get("context_id") or "default",
        )

        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            self._observe(request, 500, start)
            log.error("请求异常", method=request.method, route=route_template(request), exc_info=True)
            raise

        duration_ms = self._observe(request, response.status_code, start)
        log.info(
            "请求完成",
            method=request.method,
            route=route_template(request),
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        )
        response.headers[TRACE_HEADER] = trace_id
        return response

    @staticmethod
    def _observe(request: Request, status_code: int, start: float) -> float:
        duration_ms = (time.monotonic() - start) * 1000
        endpoint = route_template(request)
        REQUEST_TOTAL.labels(
            method=request.method, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration_ms)
        return duration_ms
