"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
核心业务只依赖此契约，不依赖具体存储引擎。
"""

from typing import Protocol

from ..models.page import Page, SortSpec
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口

    实现方不得自动提交事务；读取后写入的同一编码必须反映最新的子任务状态。
    """

    async def find_by_code(self, code: str) -> Task | None:
        """根据 code 查询任务（含直接子任务编码）"""
        ...

    async def find_all(self, page: int, size: int, sort: SortSpec) -> Page[Task]:
        """分页查询任务"""
        ...

    async def find_by_parent_code(self, code: str) -> list[Task]:
        """查询直接子任务"""
        ...

    async def find_root_tasks(self) -> list[Task]:
        """查询所有无父任务的任务"""
        ...

    async def find_ancestors(self, code: str, limit: int) -> list[Task]:
        """加载祖先链（自身在前），最多 limit 个"""
        ...

    async def subtree_height(self, code: str, limit: int) -> int:
        """子树高度（叶子为 1），最多统计到 limit 层"""
        ...

    async def list_codes(self) -> list[str]:
        """列出全部已持久化编码"""
        ...

    async def save(self, task: Task) -> Task:
        """新增或更新任务，首次保存分配 id 与时间戳"""
        ...

    async def delete(self, task: Task) -> None:
        """删除任务"""
        ...
