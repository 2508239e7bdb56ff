"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store / TaskManager 实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from tasktree.core.store import StoreGroup

from .services.task_manager import TaskManager


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_manager(request: Request) -> TaskManager:
    """从 app.state 获取 TaskManager 实例"""
    return request.app.state.task_manager
