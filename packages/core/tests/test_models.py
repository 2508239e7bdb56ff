"""Domain Models 单元测试

测试内容：
1. 枚举序列化与排序方向解析
2. TaskRequest 字段校验
3. Page 分页元数据
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from tasktree.core.models import (
    Page,
    SortDirection,
    SortSpec,
    Task,
    TaskRequest,
    TaskStatus,
    TaskView,
)


class TestEnums:
    """枚举测试"""

    def test_task_status_values(self):
        assert [s.value for s in TaskStatus] == [
            "PENDING",
            "IN_PROGRESS",
            "COMPLETED",
            "CANCELLED",
        ]

    def test_task_status_from_string(self):
        assert TaskStatus("IN_PROGRESS") == TaskStatus.IN_PROGRESS

    @pytest.mark.parametrize("raw", ["asc", "ASC", "Asc"])
    def test_sort_direction_asc_case_insensitive(self, raw: str):
        assert SortDirection.parse(raw) == SortDirection.ASC

    @pytest.mark.parametrize("raw", ["desc", "DESC", "", "sideways", None])
    def test_sort_direction_defaults_to_desc(self, raw):
        """非 asc 的值一律视为降序"""
        assert SortDirection.parse(raw) == SortDirection.DESC


class TestTaskRequest:
    """TaskRequest 校验测试"""

    def test_minimal_request(self):
        req = TaskRequest(title="写文档", status=TaskStatus.PENDING, creator_id=7)
        assert req.parent_code is None
        assert req.description is None

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskRequest(title="", status=TaskStatus.PENDING, creator_id=1)

    def test_status_required(self):
        with pytest.raises(ValidationError):
            TaskRequest(title="x", creator_id=1)

    def test_creator_required(self):
        with pytest.raises(ValidationError):
            TaskRequest(title="x", status=TaskStatus.PENDING)

    def test_description_max_length(self):
        TaskRequest(title="x", status="PENDING", creator_id=1, description="a" * 1000)
        with pytest.raises(ValidationError):
            TaskRequest(title="x", status="PENDING", creator_id=1, description="a" * 1001)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskRequest(title="x", status="DONE", creator_id=1)


class TestTaskModels:
    """Task / TaskView 测试"""

    def test_task_defaults(self):
        task = Task(code="AB-12-cd34", title="根任务")
        assert task.status == TaskStatus.PENDING
        assert task.child_codes == []
        assert task.is_root

    def test_task_with_parent_is_not_root(self):
        task = Task(code="AB-12-cd34", title="子任务", parent_code="ZZ-00-0000")
        assert not task.is_root

    def test_view_requires_positive_level(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            TaskView(
                id=1,
                code="AB-12-cd34",
                title="x",
                status=TaskStatus.PENDING,
                created_at=now,
                updated_at=now,
                hierarchy_level=0,
            )

    def test_view_json_uses_snake_case(self):
        now = datetime.now(UTC)
        view = TaskView(
            id=1,
            code="AB-12-cd34",
            title="x",
            status=TaskStatus.PENDING,
            created_at=now,
            updated_at=now,
            hierarchy_level=1,
        )
        data = view.model_dump(mode="json")
        assert data["hierarchy_level"] == 1
        assert data["child_codes"] == []
        assert data["parent_code"] is None


class TestPage:
    """Page 测试"""

    def test_total_pages(self):
        page = Page[int](items=[1, 2], page=0, size=2, total_elements=5)
        assert page.total_pages == 3

    def test_empty_page(self):
        page = Page[int](items=[], page=0, size=10, total_elements=0)
        assert page.total_pages == 0

    def test_total_pages_serialized(self):
        page = Page[int](items=[1], page=0, size=1, total_elements=1)
        assert page.model_dump()["total_pages"] == 1

    def test_map_keeps_metadata(self):
        page = Page[int](items=[1, 2], page=1, size=2, total_elements=4)
        mapped = page.map(str)
        assert mapped.items == ["1", "2"]
        assert (mapped.page, mapped.size, mapped.total_elements) == (1, 2, 4)

    def test_sort_spec_defaults(self):
        sort = SortSpec()
        assert sort.field == "created_at"
        assert sort.direction == SortDirection.DESC
