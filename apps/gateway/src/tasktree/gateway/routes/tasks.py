"""任务树路由

POST   /api/tasks                  创建任务
GET    /api/tasks                  分页查询
GET    /api/tasks/root             根任务列表
GET    /api/tasks/{code}           按编码查询
PUT    /api/tasks/{code}           更新任务
DELETE /api/tasks/{code}           删除任务（存在子任务时拒绝）
GET    /api/tasks/{code}/children  直接子任务列表

领域异常由 errors.py 统一映射：404 不存在 / 400 规则校验失败 / 500 编码耗尽。
"""

import structlog
from fastapi import APIRouter, Depends, Query
from starlette.responses import Response
from tasktree.core.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    MAX_PAGE_SIZE,
)
from tasktree.core.models import Page, TaskRequest, TaskView

from ..deps import get_task_manager
from ..services.task_manager import TaskManager

log = structlog.get_logger()

router = APIRouter()


@router.post("/api/tasks", response_model=TaskView, status_code=201)
async def create_task(
    body: TaskRequest,
    manager: TaskManager = Depends(get_task_manager),
):
    """创建任务，parent_code 非空时挂到父任务下"""
    await log.ainfo("create_task_received", title=body.title)
    return await manager.create(body)


@router.get("/api/tasks", response_model=Page[TaskView])
async def list_tasks(
    page: int = Query(default=0, ge=0, description="页码（从 0 开始）"),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="每页条数"),
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, description="排序字段"),
    sort_dir: str = Query(default=DEFAULT_SORT_DIRECTION, description="asc / desc"),
    manager: TaskManager = Depends(get_task_manager),
):
    """分页查询任务"""
    return await manager.list_tasks(page, size, sort_by, sort_dir)


@router.get("/api/tasks/root", response_model=list[TaskView])
async def list_root_tasks(manager: TaskManager = Depends(get_task_manager)):
    """查询所有根任务（无父任务）"""
    return await manager.list_roots()


@router.get("/api/tasks/{code}", response_model=TaskView)
async def get_task(code: str, manager: TaskManager = Depends(get_task_manager)):
    """按编码查询任务"""
    return await manager.get_by_code(code)


@router.put("/api/tasks/{code}", response_model=TaskView)
async def update_task(
    code: str,
    body: TaskRequest,
    manager: TaskManager = Depends(get_task_manager),
):
    """更新任务；parent_code 为空时任务脱离父任务成为根任务"""
    await log.ainfo("update_task_received", code=code)
    return await manager.update(code, body)


@router.delete("/api/tasks/{code}", status_code=204)
async def delete_task(code: str, manager: TaskManager = Depends(get_task_manager)):
    """删除任务"""
    await log.ainfo("delete_task_received", code=code)
    await manager.delete(code)
    return Response(status_code=204)


@router.get("/api/tasks/{code}/children", response_model=list[TaskView])
async def list_child_tasks(code: str, manager: TaskManager = Depends(get_task_manager)):
    """查询直接子任务"""
    return await manager.list_children(code)
