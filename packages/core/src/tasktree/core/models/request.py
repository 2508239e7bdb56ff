"""TaskRequest / TaskView -- 调用方入参与返回视图

TaskRequest 同时用于创建和更新；字段级校验由 pydantic 声明完成，
核心层不再重复校验。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskStatus


class TaskRequest(BaseModel):
    """创建/更新任务的请求体"""

    title: str = Field(min_length=1, description="任务标题，必填")
    description: str | None = Field(default=None, max_length=1000, description="任务描述")
    status: TaskStatus = Field(description="任务状态，必填")
    assigned_date: datetime | None = Field(default=None, description="分配时间")
    due_date: datetime | None = Field(default=None, description="截止时间")
    creator_id: int = Field(description="创建者 ID，必填")
    assignee_id: int | None = Field(default=None, description="负责人 ID")
    parent_code: str | None = Field(
        default=None,
        description="父任务编码；为空或空字符串表示根任务（更新时即脱离父任务）",
    )
    priority: str | None = Field(default=None, description="优先级")
    tags: str | None = Field(default=None, description="标签")


class TaskView(BaseModel):
    """任务返回视图"""

    id: int
    code: str
    title: str
    description: str | None = None
    status: TaskStatus
    assigned_date: datetime | None = None
    due_date: datetime | None = None
    creator_id: int | None = None
    assignee_id: int | None = None
    parent_code: str | None = None
    priority: str | None = None
    tags: str | None = None
    created_at: datetime
    updated_at: datetime
    hierarchy_level: int = Field(ge=1, description="层级，根任务为 1")
    child_codes: list[str] = Field(default_factory=list)
