"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient + TaskManager fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tasktree.core.codes import CodeGenerator
from tasktree.core.store import StoreGroup, create_store_group
from tasktree.gateway.services.task_manager import TaskManager


@pytest_asyncio.fixture
async def gateway_tmp_dir(tmp_path: Path) -> Path:
    """Gateway 临时数据目录"""
    db_dir = tmp_path / "sqlite"
    db_dir.mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest_asyncio.fixture
async def store_group(gateway_tmp_dir: Path) -> AsyncGenerator[StoreGroup, None]:
    group = await create_store_group(str(gateway_tmp_dir / "sqlite" / "test.db"))
    yield group
    await group.close()


@pytest_asyncio.fixture
async def code_generator() -> CodeGenerator:
    return CodeGenerator()


@pytest_asyncio.fixture
async def manager(store_group: StoreGroup, code_generator: CodeGenerator) -> TaskManager:
    """直接调用业务层的 TaskManager"""
    return TaskManager(store_group, code_generator)


@pytest_asyncio.fixture
async def app(gateway_tmp_dir: Path, store_group: StoreGroup, code_generator, manager):
    """创建测试用 FastAPI app 实例（手动初始化 app.state，绕过 lifespan）"""
    os.environ["TASKTREE_DB_PATH"] = str(gateway_tmp_dir / "sqlite" / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from tasktree.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.code_generator = code_generator
    application.state.task_manager = manager
    yield application

    for key in ["TASKTREE_DB_PATH", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
