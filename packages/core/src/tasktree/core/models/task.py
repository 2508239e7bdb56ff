"""Task Domain Model

parent_code 是任务树唯一的权威边；child_codes 只是读取时由 store 派生的视图，
从不独立写入。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskStatus


class Task(BaseModel):
    """Task 数据模型

    id / created_at / updated_at 由 store 在首次保存时分配。
    """

    id: int | None = Field(default=None, description="内部代理键，store 分配")
    code: str = Field(description="对外唯一编码，创建后不可变")
    title: str = Field(min_length=1, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    assigned_date: datetime | None = Field(default=None, description="分配时间")
    due_date: datetime | None = Field(default=None, description="截止时间")
    creator_id: int | None = Field(default=None, description="创建者 ID（不校验）")
    assignee_id: int | None = Field(default=None, description="负责人 ID（不校验）")
    parent_code: str | None = Field(default=None, description="父任务编码，根任务为空")
    priority: str | None = Field(default=None, description="优先级（自由文本）")
    tags: str | None = Field(default=None, description="标签（自由文本）")
    created_at: datetime | None = Field(default=None, description="创建时间")
    updated_at: datetime | None = Field(default=None, description="更新时间")
    child_codes: list[str] = Field(
        default_factory=list,
        description="直接子任务编码（派生视图，按 id 升序）",
    )

    @property
    def is_root(self) -> bool:
        return self.parent_code is None
