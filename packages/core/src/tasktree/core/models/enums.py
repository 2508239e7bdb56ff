"""枚举定义

包含 TaskStatus 任务状态集合与 SortDirection 排序方向。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态（固定枚举集合，不约束流转顺序）"""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SortDirection(StrEnum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str | None) -> "SortDirection":
        """大小写不敏感解析：仅 "asc" 视为升序，其余一律降序"""
        if value is not None and value.lower() == cls.ASC.value:
            return cls.ASC
        return cls.DESC
