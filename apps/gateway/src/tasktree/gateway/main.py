"""FastAPI 应用主文件

app 创建 + lifespan 管理：Store 初始化/关闭 + 编码登记表恢复 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from tasktree.core.codes import CodeGenerator
from tasktree.core.config import get_db_path
from tasktree.core.store import create_store_group

from .errors import register_error_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, tasks
from .services.task_manager import TaskManager

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 Store 并恢复已发放编码，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group

    # 编码登记表在进程内维护，重启后从库中恢复，避免重复发放
    code_generator = CodeGenerator()
    task_manager = TaskManager(store_group, code_generator)
    restored = await task_manager.rehydrate()
    app.state.code_generator = code_generator
    app.state.task_manager = task_manager
    log.info("task_manager_initialized", db_path=str(db_path), restored_codes=restored)

    yield

    # 关闭：清理数据库连接
    if getattr(app.state, "store_group", None):
        await app.state.store_group.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskTree Gateway",
        version="0.1.0",
        description="层级任务管理 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire()

    register_error_handlers(app)

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
