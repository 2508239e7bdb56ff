"""任务树层级规则 -- 纯函数，无 I/O、无副作用

所有函数作用于"祖先链"：由 store 加载的 Task 序列，chain[0] 为节点自身，
chain[i + 1] 为 chain[i] 的父任务。store 最多加载 MAX_HIERARCHY_LEVEL 个节点，
因此任何遍历的跳数都有上界。
"""

from collections.abc import Sequence

from .config import MAX_HIERARCHY_LEVEL
from .models.task import Task


def depth_of(chain: Sequence[Task]) -> int:
    """计算链首节点的层级（根为 1）

    沿父指针逐跳累加，达到 MAX_HIERARCHY_LEVEL 即停止：
    真实深度超过上限的节点一律报告为 MAX_HIERARCHY_LEVEL（饱和语义）。

    Raises:
        ValueError: chain 为空
    """
    if not chain:
        raise ValueError("ancestor chain must contain at least the node itself")

    depth = 1
    current = chain[0]
    for ancestor in chain[1:]:
        if current.parent_code is None or depth >= MAX_HIERARCHY_LEVEL:
            break
        # 链断开（数据不一致）时停止
        if ancestor.code != current.parent_code:
            break
        depth += 1
        current = ancestor
    return depth


def would_exceed_max_depth(parent_chain: Sequence[Task]) -> bool:
    """在候选父任务下挂子任务是否会超过最大层级"""
    return depth_of(parent_chain) >= MAX_HIERARCHY_LEVEL


def detects_cycle(task_code: str, parent_chain: Sequence[Task]) -> bool:
    """以候选父任务为父是否会使任务成为自己的祖先（候选父任务自身也计入）"""
    return any(node.code == task_code for node in parent_chain[:MAX_HIERARCHY_LEVEL])


def exceeds_after_move(parent_chain: Sequence[Task], subtree_height: int) -> bool:
    """把高度为 subtree_height 的子树挂到候选父任务下，最深后代是否会超过最大层级"""
    return depth_of(parent_chain) + subtree_height > MAX_HIERARCHY_LEVEL
