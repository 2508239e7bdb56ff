"""TaskStore SQLite 实现

所有方法都不自动提交事务，事务边界由调用方（StoreGroup.transaction /
StoreGroup.snapshot）管理。读取结果中的 child_codes 由 parent_code 派生。
"""

from datetime import UTC, datetime

import aiosqlite

from ..exceptions import TaskNotFoundError, TaskValidationError
from ..models.enums import SortDirection
from ..models.page import Page, SortSpec
from ..models.task import Task

_COLUMN_NAMES = (
    "id",
    "code",
    "title",
    "description",
    "status",
    "assigned_date",
    "due_date",
    "creator_id",
    "assignee_id",
    "parent_code",
    "priority",
    "tags",
    "created_at",
    "updated_at",
)
_COLUMNS = ", ".join(_COLUMN_NAMES)
_T_COLUMNS = ", ".join(f"t.{name}" for name in _COLUMN_NAMES)

# 对外排序键 -> 列名（同时接受 camelCase 别名）
_SORT_COLUMNS: dict[str, str] = {
    "id": "id",
    "code": "code",
    "title": "title",
    "status": "status",
    "priority": "priority",
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
    "assigned_date": "assigned_date",
    "assignedDate": "assigned_date",
    "due_date": "due_date",
    "dueDate": "due_date",
}

# SQLite 绑定参数数量上限的保守取值
_IN_CLAUSE_CHUNK = 500


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def find_by_code(self, code: str) -> Task | None:
        """根据 code 查询任务（含直接子任务编码）"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE code = ?",
            (code,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        tasks = await self._with_children([self._row_to_task(row)])
        return tasks[0]

    async def find_all(self, page: int, size: int, sort: SortSpec) -> Page[Task]:
        """分页查询，按 sort 排序，id 作为同向次排序键"""
        column = self.sort_column(sort.field)
        direction = "ASC" if sort.direction == SortDirection.ASC else "DESC"

        cursor = await self._conn.execute("SELECT COUNT(*) FROM tasks")
        row = await cursor.fetchone()
        total = row[0] if row else 0

        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks "
            f"ORDER BY {column} {direction}, id {direction} LIMIT ? OFFSET ?",
            (size, page * size),
        )
        rows = await cursor.fetchall()
        items = await self._with_children([self._row_to_task(r) for r in rows])
        return Page[Task](items=items, page=page, size=size, total_elements=total)

    async def find_by_parent_code(self, code: str) -> list[Task]:
        """查询直接子任务，按 id 升序"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE parent_code = ? ORDER BY id ASC",
            (code,),
        )
        rows = await cursor.fetchall()
        return await self._with_children([self._row_to_task(r) for r in rows])

    async def find_root_tasks(self) -> list[Task]:
        """查询所有根任务，按 id 升序"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE parent_code IS NULL ORDER BY id ASC"
        )
        rows = await cursor.fetchall()
        return await self._with_children([self._row_to_task(r) for r in rows])

    async def find_ancestors(self, code: str, limit: int) -> list[Task]:
        """加载祖先链：首元素为 code 对应任务，依次向上，最多 limit 个

        code 不存在时返回空列表。
        """
        cursor = await self._conn.execute(
            f"""
            WITH RECURSIVE chain(code, hop) AS (
                SELECT ?, 0
                UNION ALL
                SELECT t.parent_code, chain.hop + 1
                FROM tasks t JOIN chain ON t.code = chain.code
                WHERE t.parent_code IS NOT NULL AND chain.hop + 1 < ?
            )
            SELECT {_T_COLUMNS} FROM chain JOIN tasks t ON t.code = chain.code
            ORDER BY chain.hop ASC
            """,
            (code, limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(r) for r in rows]

    async def subtree_height(self, code: str, limit: int) -> int:
        """以 code 为根的子树高度（叶子为 1），最多统计到 limit 层"""
        cursor = await self._conn.execute(
            """
            WITH RECURSIVE sub(code, hop) AS (
                SELECT ?, 1
                UNION ALL
                SELECT t.code, sub.hop + 1
                FROM tasks t JOIN sub ON t.parent_code = sub.code
                WHERE sub.hop < ?
            )
            SELECT MAX(hop) FROM sub
            """,
            (code, limit),
        )
        row = await cursor.fetchone()
        return row[0] if row and row[0] is not None else 1

    async def list_codes(self) -> list[str]:
        """列出全部已持久化编码"""
        cursor = await self._conn.execute("SELECT code FROM tasks ORDER BY id ASC")
        rows = await cursor.fetchall()
        return [r[0] for r in rows]

    async def save(self, task: Task) -> Task:
        """新增（id 为空）或更新任务

        首次保存分配 id / created_at / updated_at；更新时刷新 updated_at。
        code、creator_id、created_at 不会被更新。
        """
        now = datetime.now(UTC)
        if task.id is None:
            cursor = await self._conn.execute(
                """
                INSERT INTO tasks (code, title, description, status, assigned_date,
                                   due_date, creator_id, assignee_id, parent_code,
                                   priority, tags, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.code,
                    task.title,
                    task.description,
                    task.status.value,
                    _to_text(task.assigned_date),
                    _to_text(task.due_date),
                    task.creator_id,
                    task.assignee_id,
                    task.parent_code,
                    task.priority,
                    task.tags,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
            return task.model_copy(
                update={"id": cursor.lastrowid, "created_at": now, "updated_at": now}
            )

        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, status = ?, assigned_date = ?,
                due_date = ?, assignee_id = ?, parent_code = ?, priority = ?,
                tags = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                task.title,
                task.description,
                task.status.value,
                _to_text(task.assigned_date),
                _to_text(task.due_date),
                task.assignee_id,
                task.parent_code,
                task.priority,
                task.tags,
                now.isoformat(),
                task.id,
            ),
        )
        if cursor.rowcount == 0:
            raise TaskNotFoundError(f"Task not found with code: {task.code}")
        return task.model_copy(update={"updated_at": now})

    async def delete(self, task: Task) -> None:
        """删除任务（外键 RESTRICT 保证不会留下悬空子任务）"""
        await self._conn.execute("DELETE FROM tasks WHERE id = ?", (task.id,))

    @staticmethod
    def sort_column(field: str) -> str:
        """对外排序键映射为列名，未知键拒绝（避免拼接任意 SQL）"""
        column = _SORT_COLUMNS.get(field)
        if column is None:
            raise TaskValidationError(f"Unsupported sort field: {field}")
        return column

    async def _with_children(self, tasks: list[Task]) -> list[Task]:
        """批量填充 child_codes（一次 IN 查询，避免 N+1）"""
        if not tasks:
            return tasks

        children: dict[str, list[str]] = {}
        codes = [t.code for t in tasks]
        for start in range(0, len(codes), _IN_CLAUSE_CHUNK):
            chunk = codes[start : start + _IN_CLAUSE_CHUNK]
            placeholders = ", ".join("?" for _ in chunk)
            cursor = await self._conn.execute(
                f"SELECT parent_code, code FROM tasks "
                f"WHERE parent_code IN ({placeholders}) ORDER BY id ASC",
                chunk,
            )
            for parent_code, child_code in await cursor.fetchall():
                children.setdefault(parent_code, []).append(child_code)

        return [t.model_copy(update={"child_codes": children.get(t.code, [])}) for t in tasks]

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型（列顺序与 _COLUMN_NAMES 一致）"""
        return Task(
            id=row[0],
            code=row[1],
            title=row[2],
            description=row[3],
            status=row[4],
            assigned_date=_from_text(row[5]),
            due_date=_from_text(row[6]),
            creator_id=row[7],
            assignee_id=row[8],
            parent_code=row[9],
            priority=row[10],
            tags=row[11],
            created_at=_from_text(row[12]),
            updated_at=_from_text(row[13]),
        )


def _to_text(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_text(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value is not None else None
