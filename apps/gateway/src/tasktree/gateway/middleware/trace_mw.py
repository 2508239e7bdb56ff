"""TraceMiddleware -- 任务级追踪

路径形如 /api/tasks/{code}[/children] 时，以任务编码生成 trace_id
并绑定到 structlog contextvars，同一任务的日志可以串联查看。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from tasktree.core.codes import CodeGenerator


def extract_task_code(path: str) -> str | None:
    """从请求路径中提取合法的任务编码，找不到时返回 None"""
    parts = path.split("/")
    for i, part in enumerate(parts):
        if part == "tasks" and i + 1 < len(parts):
            candidate = parts[i + 1]
            # /api/tasks/root 等非编码段不参与追踪
            if CodeGenerator.validate_format(candidate):
                return candidate
            return None
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件 -- 为任务操作绑定 trace_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        code = extract_task_code(request.url.path)
        if code:
            structlog.contextvars.bind_contextvars(task_code=code, trace_id=f"trace-{code}")

        return await call_next(request)
