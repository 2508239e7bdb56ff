"""分页与排序模型"""

import math
from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

from .enums import SortDirection

T = TypeVar("T")
U = TypeVar("U")


class SortSpec(BaseModel):
    """排序规格：field 为对外排序键，由 store 映射到列名"""

    field: str = Field(default="created_at", description="排序字段")
    direction: SortDirection = Field(default=SortDirection.DESC, description="排序方向")


class Page(BaseModel, Generic[T]):
    """分页结果（page 从 0 开始）"""

    items: list[T] = Field(default_factory=list)
    page: int = Field(ge=0)
    size: int = Field(ge=1)
    total_elements: int = Field(ge=0)

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.total_elements else 0

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        """转换条目，保留分页元数据"""
        return Page[U](
            items=[fn(item) for item in self.items],
            page=self.page,
            size=self.size,
            total_elements=self.total_elements,
        )
