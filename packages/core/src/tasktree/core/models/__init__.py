"""TaskTree Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import SortDirection, TaskStatus
from .page import Page, SortSpec
from .request import TaskRequest, TaskView
from .task import Task

__all__ = [
    # 枚举
    "TaskStatus",
    "SortDirection",
    # Task
    "Task",
    "TaskRequest",
    "TaskView",
    # 分页
    "Page",
    "SortSpec",
]
