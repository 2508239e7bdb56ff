"""领域异常 -> HTTP 错误响应映射

统一错误体：{"error": {"code": ..., "message": ...}}
"""

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from tasktree.core.exceptions import (
    CodeGenerationExhaustedError,
    TaskNotFoundError,
    TaskTreeError,
    TaskValidationError,
)

log = structlog.get_logger()

_STATUS_CODES: dict[type[TaskTreeError], int] = {
    TaskNotFoundError: 404,
    TaskValidationError: 400,
    CodeGenerationExhaustedError: 500,
}


def build_error_payload(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def task_tree_error_handler(_: Request, exc: TaskTreeError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        await log.aerror("task_tree_internal_error", error_code=exc.code, message=exc.message)
    else:
        await log.ainfo("task_tree_request_rejected", error_code=exc.code, message=exc.message)
    return JSONResponse(
        status_code=status_code,
        content=build_error_payload(exc.code, exc.message),
    )


def register_error_handlers(app: FastAPI) -> None:
    """注册领域异常处理器"""
    app.add_exception_handler(TaskTreeError, task_tree_error_handler)
