"""TaskTree Core Store -- SQLite 持久化实现

提供工厂函数创建共享同一数据库文件的 Store 实例组：
一个写连接（串行写事务）+ 一个读连接（WAL 快照读）。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from .protocols import TaskStore
from .sqlite_init import configure_connection, init_db
from .task_store import SqliteTaskStore
from .transaction import read_snapshot, write_transaction


class StoreGroup:
    """Store 实例组 -- 写连接与读连接指向同一数据库文件"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        read_conn: aiosqlite.Connection,
    ) -> None:
        self.conn = conn
        self.read_conn = read_conn
        self.task_store = SqliteTaskStore(conn)
        self.read_task_store = SqliteTaskStore(read_conn)
        self._write_lock = asyncio.Lock()
        self._read_lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqliteTaskStore]:
        """写事务：成功提交，异常回滚"""
        async with write_transaction(self.conn, self._write_lock):
            yield self.task_store

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[SqliteTaskStore]:
        """只读快照：不会看到写到一半的父子状态"""
        async with read_snapshot(self.read_conn, self._read_lock):
            yield self.read_task_store

    async def close(self) -> None:
        await self.read_conn.close()
        await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    read_conn = await aiosqlite.connect(db_path)
    await configure_connection(read_conn)

    return StoreGroup(conn=conn, read_conn=read_conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "TaskStore",
    "SqliteTaskStore",
    "init_db",
    "write_transaction",
    "read_snapshot",
]
