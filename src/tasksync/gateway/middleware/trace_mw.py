"""TraceMiddleware -- 为单任务操作绑定 task_id

从 /api/v1/tasks/{task_id} 路径中提取 task_id，贯穿该请求的所有日志
（包括变更提交后的 event_published）。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# /api/v1/tasks/ 之后的非 task_id 子路由
_NON_TASK_SEGMENTS = {"dashboard"}


def extract_task_id(path: str) -> str | None:
    """从请求路径提取 task_id；不是单任务路径时返回 None"""
    parts = [p for p in path.split("/") if p]
    for i, part in enumerate(parts):
        if part == "tasks" and i + 1 < len(parts):
            candidate = parts[i + 1]
            if candidate not in _NON_TASK_SEGMENTS:
                return candidate
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
