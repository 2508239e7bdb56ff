"""全局 pytest 配置 -- 任务请求构造 fixture"""

import pytest


@pytest.fixture
def make_request():
    """构造 TaskRequest，默认为 PENDING 根任务"""
    from tasktree.core.models import TaskRequest, TaskStatus

    def _make(title: str = "任务", parent_code: str | None = None, **overrides) -> TaskRequest:
        fields = {
            "title": title,
            "status": TaskStatus.PENDING,
            "creator_id": 1,
            "parent_code": parent_code,
        }
        fields.update(overrides)
        return TaskRequest(**fields)

    return _make
