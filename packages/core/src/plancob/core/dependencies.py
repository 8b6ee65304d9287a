"""任务依赖校验

每次 task.add / task.blockedBy 提交前执行：
1. blocked_by 中的每个 ID 必须是已创建过的任务（含已删除任务）
2. 在未删除任务的 blocked_by 边构成的有向图上做可达性检查，新的边集合不能形成环

另外提供只读查询：unblocked_tasks（前置任务全部完成）与 execution_batches（按依赖分层）。
"""

from collections.abc import Mapping, Sequence

import structlog

from .exceptions import ActionRejected
from .models.enums import OutcomeKind
from .models.plan import Plan, Task
from .policies import dedupe

log = structlog.get_logger()


def _find_path(
    graph: Mapping[str, Sequence[str]],
    start: str,
    target: str,
) -> list[str] | None:
    """迭代 DFS，返回 start 沿 blocked_by 边到达 target 的路径"""
    stack: list[tuple[str, list[str]]] = [(start, [start])]
    visited: set[str] = set()
    while stack:
        node, path = stack.pop()
        if node == target:
            return path
        if node in visited:
            continue
        visited.add(node)
        # 逆序入栈，保证按 blocked_by 原顺序探索
        for dep in reversed(graph.get(node, ())):
            if dep not in visited:
                stack.append((dep, [*path, dep]))
    return None


def find_cycle(
    edges: Mapping[str, Sequence[str]],
    task_id: str,
    blocked_by: Sequence[str],
) -> list[str] | None:
    """检查把 task_id 的依赖替换为 blocked_by 后是否成环

    Args:
        edges: 当前依赖图 task_id -> blocked_by
        task_id: 被修改的任务
        blocked_by: 新的依赖列表

    Returns:
        环路径（首尾都是 task_id），无环时返回 None
    """
    graph = dict(edges)
    graph[task_id] = list(blocked_by)
    for start in blocked_by:
        path = _find_path(graph, start, task_id)
        if path is not None:
            return [task_id, *path]
    return None


def validate_blocked_by(
    plan: Plan,
    task_id: str,
    blocked_by: Sequence[str],
) -> list[str]:
    """校验新的依赖列表，返回去重后的列表（保留首次出现顺序）

    Raises:
        ActionRejected: UNKNOWN_TASK_ID 或 CYCLIC_DEPENDENCY
    """
    deduped = dedupe(blocked_by)

    for blocker in deduped:
        if plan.known_task(blocker) is None and blocker != task_id:
            raise ActionRejected(
                OutcomeKind.UNKNOWN_TASK_ID,
                f"blocking task {blocker} does not exist",
            )

    edges = {t.id: t.blocked_by for t in plan.tasks}
    cycle = find_cycle(edges, task_id, deduped)
    if cycle is not None:
        log.debug("dependency_cycle_detected", task_id=task_id, cycle=cycle)
        raise ActionRejected(
            OutcomeKind.CYCLIC_DEPENDENCY,
            "dependency cycle: " + " -> ".join(c[:7] for c in cycle),
        )
    return deduped


def done_task_ids(plan: Plan) -> set[str]:
    """已完成任务的 ID，包括已删除但关联过提交的任务"""
    done = {t.id for t in plan.tasks if t.is_done}
    done.update(t.id for t in plan.removed_tasks.values() if t.is_done)
    return done


def is_unblocked(task: Task, done_ids: set[str]) -> bool:
    """task 的每个前置任务都已完成；没有前置任务时恒为 True"""
    return all(blocker in done_ids for blocker in task.blocked_by)


def unblocked_tasks(plan: Plan) -> list[Task]:
    """返回所有未被阻塞的未删除任务，按 plan 顺序"""
    done_ids = done_task_ids(plan)
    return [t for t in plan.tasks if is_unblocked(t, done_ids)]


def execution_batches(plan: Plan) -> list[list[str]]:
    """按依赖分层的执行顺序

    每一层内的任务互不依赖，可以并行；层内按 plan 顺序排列。
    只考虑未删除任务之间的依赖边。

    Example:
        [
            ["t1", "t2"],  # 无依赖
            ["t3"],        # 依赖 t1 / t2
        ]
    """
    live = plan.task_ids()
    live_set = set(live)
    deps = {
        t.id: {b for b in t.blocked_by if b in live_set and b != t.id}
        for t in plan.tasks
    }

    batches: list[list[str]] = []
    scheduled: set[str] = set()
    remaining = list(live)

    while remaining:
        batch = [tid for tid in remaining if deps[tid] <= scheduled]
        if not batch:
            # 归约过程保证无环，出现即为数据损坏
            log.error("execution_order_deadlock", remaining=remaining)
            raise RuntimeError(f"任务依赖存在环，无法排序: {remaining}")
        batches.append(batch)
        scheduled.update(batch)
        remaining = [tid for tid in remaining if tid not in scheduled]

    return batches
