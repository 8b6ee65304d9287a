"""字段级冲突解决策略

action 序列在进入归约器前已经由存储层按因果/拓扑顺序确定性排序，
因此对所有观察到同一序列的参与者，"序列中最后写入者胜出"即可收敛，无需比较时间戳。

- 单值字段：后写者胜出；部分编辑中未出现的字段保持不变
- 集合字段：link / add / label / assign 取并集，unlink / remove 删除成员，
  成员关系只由 action 顺序决定
- 任务顺序：创建时追加；reorder 用给定排列覆盖，未列出的任务按原相对顺序追加到末尾
- blocked_by：整体替换
"""

from collections.abc import Collection, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from .exceptions import ActionRejected
from .models.enums import OutcomeKind

T = TypeVar("T")


def partial_update(
    values: Mapping[str, Any],
    provided: Iterable[str],
    *,
    clearable: Collection[str] = (),
) -> dict[str, Any]:
    """提取部分编辑中需要写入的字段

    Args:
        values: action 中的字段值
        provided: action 显式给出的字段名
        clearable: 允许用 None 清空的字段

    Returns:
        可直接用于 model_copy(update=...) 的字段字典
    """
    provided = set(provided)
    update: dict[str, Any] = {}
    for name, value in values.items():
        if name not in provided:
            continue
        if value is None and name not in clearable:
            continue
        update[name] = value
    return update


def union_add(members: set[T], items: Iterable[T]) -> set[T]:
    return members | set(items)


def remove_members(members: set[T], items: Iterable[T]) -> set[T]:
    return members - set(items)


def dedupe(items: Iterable[T]) -> list[T]:
    """去重并保留首次出现的顺序"""
    return list(dict.fromkeys(items))


def reorder(current: Sequence[str], order: Sequence[str]) -> list[str]:
    """用 order 覆盖任务顺序

    order 必须是当前未删除任务 ID 的子排列；未列出的任务按原相对顺序追加到末尾，
    避免静默丢失任务。

    Raises:
        ActionRejected: INVALID_REORDER（未知、已删除或重复的 ID）
    """
    live = set(current)
    seen: set[str] = set()
    for task_id in order:
        if task_id in seen:
            raise ActionRejected(
                OutcomeKind.INVALID_REORDER,
                f"task {task_id} appears more than once",
            )
        if task_id not in live:
            raise ActionRejected(
                OutcomeKind.INVALID_REORDER,
                f"task {task_id} is unknown or removed",
            )
        seen.add(task_id)
    return [*order, *(task_id for task_id in current if task_id not in seen)]
