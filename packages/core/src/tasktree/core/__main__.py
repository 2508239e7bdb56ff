"""CLI 入口模块 -- python -m tasktree.core <command>

支持的命令：
  init-db          在 TASKTREE_DB_PATH 初始化数据库
  check-integrity  检查任务树不变量，发现违规时以状态码 1 退出
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m tasktree.core <command>
命令:
  init-db          初始化数据库
  check-integrity  检查任务树完整性"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "check-integrity":
        violation_count = asyncio.run(check_integrity())
        if violation_count:
            sys.exit(1)
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, check-integrity")
        sys.exit(1)


async def init_database() -> None:
    """创建数据库文件与表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    await store_group.close()
    print("初始化完成")


async def check_integrity() -> int:
    """执行完整性检查，返回违规数量"""
    from .integrity import check_store
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)

    try:
        violations = await check_store(store_group.read_conn)
    finally:
        await store_group.close()

    for violation in violations:
        print(f"[{violation.kind}] {violation.code} {violation.detail}".rstrip())
    print(f"检查完成，发现 {len(violations)} 处违规")
    return len(violations)


if __name__ == "__main__":
    main()
