"""事务封装

写事务：同一写锁下 BEGIN IMMEDIATE，读-校验-写整体原子提交，任一异常回滚。
读快照：读连接上开启延迟读事务（WAL 快照），多条查询看到同一一致状态，不阻塞写入。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite


@asynccontextmanager
async def write_transaction(
    conn: aiosqlite.Connection,
    lock: asyncio.Lock,
) -> AsyncIterator[aiosqlite.Connection]:
    """在写锁内执行单个写事务

    Args:
        conn: 写连接（需在同一连接上操作以保证事务性）
        lock: 串行化同一连接上的写事务

    Raises:
        Exception: 事务体或提交失败时回滚后原样抛出
    """
    async with lock:
        await conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise


@asynccontextmanager
async def read_snapshot(
    conn: aiosqlite.Connection,
    lock: asyncio.Lock,
) -> AsyncIterator[aiosqlite.Connection]:
    """在读连接上开启只读快照

    Args:
        conn: 读连接
        lock: 串行化同一读连接上的快照（与写锁互不影响）
    """
    async with lock:
        await conn.execute("BEGIN")
        try:
            yield conn
        finally:
            await conn.rollback()
