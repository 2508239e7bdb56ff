"""SQLite 数据库初始化

PRAGMA 配置 + tasks 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
# parent_code 是唯一权威的树边；子任务集合只通过 idx_tasks_parent_code 派生查询
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    code          TEXT NOT NULL UNIQUE CHECK (length(code) = 10),
    title         TEXT NOT NULL CHECK (length(title) > 0),
    description   TEXT,
    status        TEXT NOT NULL DEFAULT 'PENDING',
    assigned_date TEXT,
    due_date      TEXT,
    creator_id    INTEGER,
    assignee_id   INTEGER,
    parent_code   TEXT REFERENCES tasks(code) ON DELETE RESTRICT,
    priority      TEXT,
    tags          TEXT,
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent_code ON tasks(parent_code);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
]


async def configure_connection(conn: aiosqlite.Connection) -> None:
    """连接级 PRAGMA（每个连接都需设置）"""
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await configure_connection(conn)

    await conn.execute(_TASKS_DDL)
    for idx_sql in _TASKS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
