"""配置常量模块 -- 路径类配置可通过环境变量覆盖

数据库路径可由环境变量覆盖；层级上限、编码格式、分页默认值为固定常量，不开放覆盖。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKTREE_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKTREE_DB_PATH",
        str(_get_base_dir() / "sqlite" / "tasktree.db"),
    )


# 任务树最大层级（根节点为第 1 层）
MAX_HIERARCHY_LEVEL: int = 5

# 编码生成最大尝试次数
MAX_GENERATION_ATTEMPTS: int = 1000

# 编码总长度：AA-00-xxxx
CODE_LENGTH: int = 10

# 编码唯一约束冲突时的最大重试次数（跨进程签发同一编码时触发）
CODE_CONFLICT_RETRIES: int = 3

# 分页默认值
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100
DEFAULT_SORT_FIELD: str = "created_at"
DEFAULT_SORT_DIRECTION: str = "desc"
