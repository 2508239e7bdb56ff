"""任务树完整性检查

扫描全部 (code, parent_code) 边，报告违反森林不变量的记录：
编码格式非法、父任务不存在、循环引用、层级超过上限。
用于导入数据或手工修库之后的巡检，正常写路径不会产生这些违规。
"""

import time
from collections.abc import Mapping
from enum import StrEnum

import aiosqlite
import structlog
from pydantic import BaseModel, Field

from .codes import CodeGenerator
from .config import MAX_HIERARCHY_LEVEL

log = structlog.get_logger()


class ViolationKind(StrEnum):
    """违规类型"""

    MALFORMED_CODE = "MALFORMED_CODE"
    DANGLING_PARENT = "DANGLING_PARENT"
    CYCLE = "CYCLE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"


class IntegrityViolation(BaseModel):
    """单条违规记录"""

    code: str = Field(description="违规任务编码")
    kind: ViolationKind = Field(description="违规类型")
    detail: str = Field(default="", description="说明")


def find_violations(edges: Mapping[str, str | None]) -> list[IntegrityViolation]:
    """检查 code -> parent_code 映射（纯函数）

    Args:
        edges: 任务编码到父任务编码的映射，根任务映射为 None

    Returns:
        违规列表，按 edges 的遍历顺序输出
    """
    violations: list[IntegrityViolation] = []

    for code, parent_code in edges.items():
        if not CodeGenerator.validate_format(code):
            violations.append(
                IntegrityViolation(code=code, kind=ViolationKind.MALFORMED_CODE)
            )
        if parent_code is not None and parent_code not in edges:
            violations.append(
                IntegrityViolation(
                    code=code,
                    kind=ViolationKind.DANGLING_PARENT,
                    detail=f"parent {parent_code} does not exist",
                )
            )

    for code in edges:
        seen = {code}
        depth = 1
        current = edges[code]
        while current is not None and current in edges:
            if current == code:
                violations.append(
                    IntegrityViolation(
                        code=code,
                        kind=ViolationKind.CYCLE,
                        detail="task is its own ancestor",
                    )
                )
                break
            if current in seen:
                # 上游存在环但本节点不在环上，由环上节点报告
                break
            seen.add(current)
            depth += 1
            current = edges[current]
        else:
            if depth > MAX_HIERARCHY_LEVEL:
                violations.append(
                    IntegrityViolation(
                        code=code,
                        kind=ViolationKind.DEPTH_EXCEEDED,
                        detail=f"depth {depth} exceeds {MAX_HIERARCHY_LEVEL}",
                    )
                )

    return violations


async def check_store(conn: aiosqlite.Connection) -> list[IntegrityViolation]:
    """读取 tasks 表的全部边并检查

    Args:
        conn: 数据库连接

    Returns:
        违规列表
    """
    start_time = time.monotonic()

    cursor = await conn.execute("SELECT code, parent_code FROM tasks ORDER BY id ASC")
    rows = await cursor.fetchall()
    edges = {row[0]: row[1] for row in rows}

    violations = find_violations(edges)

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    await log.ainfo(
        "integrity_check_completed",
        task_count=len(edges),
        violation_count=len(violations),
        elapsed_ms=elapsed_ms,
    )
    return violations
