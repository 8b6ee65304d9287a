"""Plan 状态归约器

把存储层已经确定性全序排列的 operation 序列折叠成一个 Plan 值。
每个 operation 依次经过：
1. malformed 检查（解码失败的 operation 仍占据序列位置）
2. 未初始化检查（plan 不存在时只接受 open）
3. 授权（静态规则表 + AuthorizationOracle）
4. 结构校验（引用的任务/评论/对象存在，operation ID 未被复用）
5. 字段级冲突策略（policies）

任何一步失败都只产生一个被拒绝的 ActionOutcome，折叠继续进行；
校验全部在修改之前完成，被拒绝的 action 不会改变状态。
"""

import time
from collections.abc import Callable, Iterable

import structlog

from .authorization import DelegateAuthorizer, authorize
from .dependencies import validate_blocked_by
from .exceptions import ActionRejected
from .models.actions import (
    IDENTIFIER_PRODUCING_TYPES,
    Action,
    AddComment,
    AddCriticalFile,
    AddTask,
    Assign,
    EditComment,
    EditDescription,
    EditTask,
    EditTitle,
    Label,
    LinkIssue,
    LinkPatch,
    LinkTaskToCommit,
    LinkTaskToIssue,
    Open,
    RedactComment,
    RemoveCriticalFile,
    RemoveTask,
    ReorderTasks,
    SetStatus,
    SetTaskBlockedBy,
    SetTaskStatus,
    Unassign,
    Unlabel,
    UnlinkIssue,
    UnlinkPatch,
)
from .models.enums import OutcomeKind
from .models.op import Op
from .models.outcome import ActionOutcome, ReduceResult
from .models.plan import Plan, Task
from .policies import partial_update, remove_members, reorder, union_add
from .protocols import AuthorizationOracle, OperationLog

log = structlog.get_logger()

# task.edit 中允许用 null 清空的字段
_CLEARABLE_TASK_FIELDS = frozenset({"description", "estimate"})
_TASK_EDIT_FIELDS = ("subject", "description", "estimate", "affected_files")


# ---- 引用校验 ----


def _live_task_index(plan: Plan, task_id: str) -> int:
    """返回未删除任务在 plan.tasks 中的下标

    Raises:
        ActionRejected: 任务已删除为 REMOVED_TASK_ID，从未创建为 UNKNOWN_TASK_ID
    """
    for index, task in enumerate(plan.tasks):
        if task.id == task_id:
            return index
    if plan.is_removed(task_id):
        raise ActionRejected(OutcomeKind.REMOVED_TASK_ID, f"task {task_id} was removed")
    raise ActionRejected(OutcomeKind.UNKNOWN_TASK_ID, f"task {task_id} does not exist")


def _update_task(plan: Plan, task_id: str, **update: object) -> None:
    index = _live_task_index(plan, task_id)
    plan.tasks[index] = plan.tasks[index].model_copy(update=update)


def _ensure_fresh_identifier(plan: Plan, op_id: str) -> None:
    """新任务或评论以 operation ID 为标识，不能与已有 ID 重复"""
    if plan.known_task(op_id) is not None or op_id in plan.thread:
        raise ActionRejected(
            OutcomeKind.MALFORMED,
            f"operation id {op_id} is already in use",
        )


# ---- Plan 级别 ----


def _set_description(plan: Plan, op: Op, description: str, embeds: list) -> None:
    plan.description = description
    # 描述同时是线程根评论；根评论已删除时只更新描述
    plan.thread.edit(plan.thread.root_id, op.author, op.timestamp, description, embeds)


def _reopen(plan: Plan, op: Op, action: Open) -> None:
    # plan 已存在时，open 等同于编辑标题与描述
    plan.title = action.title
    _set_description(plan, op, action.description, action.embeds)


def _edit_title(plan: Plan, op: Op, action: EditTitle) -> None:
    plan.title = action.title


def _edit_description(plan: Plan, op: Op, action: EditDescription) -> None:
    _set_description(plan, op, action.description, action.embeds)


def _set_status(plan: Plan, op: Op, action: SetStatus) -> None:
    plan.status = action.status


# ---- 任务 ----


def _add_task(plan: Plan, op: Op, action: AddTask) -> None:
    plan.tasks.append(
        Task(
            id=op.id,
            subject=action.subject,
            description=action.description,
            estimate=action.estimate,
            affected_files=list(action.affected_files),
            author=op.author,
            created_at=op.timestamp,
        )
    )


def _edit_task(plan: Plan, op: Op, action: EditTask) -> None:
    update = partial_update(
        {name: getattr(action, name) for name in _TASK_EDIT_FIELDS},
        action.model_fields_set,
        clearable=_CLEARABLE_TASK_FIELDS,
    )
    _update_task(plan, action.task_id, **update)


def _set_task_status(plan: Plan, op: Op, action: SetTaskStatus) -> None:
    # 旧版 action：任务完成只由 linked_commit 决定，这里什么也不做
    log.debug("legacy_task_status_ignored", op_id=op.id, task_id=action.task_id)


def _link_task_to_commit(plan: Plan, op: Op, action: LinkTaskToCommit) -> None:
    _update_task(plan, action.task_id, linked_commit=action.commit)


def _remove_task(plan: Plan, op: Op, action: RemoveTask) -> None:
    if plan.is_removed(action.task_id):
        return
    index = _live_task_index(plan, action.task_id)
    task = plan.tasks.pop(index)
    plan.removed_tasks[task.id] = task


def _reorder_tasks(plan: Plan, op: Op, action: ReorderTasks) -> None:
    by_id = {task.id: task for task in plan.tasks}
    order = reorder(plan.task_ids(), action.order)
    plan.tasks = [by_id[task_id] for task_id in order]


def _set_task_blocked_by(plan: Plan, op: Op, action: SetTaskBlockedBy) -> None:
    _live_task_index(plan, action.task_id)
    blocked_by = validate_blocked_by(plan, action.task_id, action.blocked_by)
    _update_task(plan, action.task_id, blocked_by=blocked_by)


def _link_task_to_issue(plan: Plan, op: Op, action: LinkTaskToIssue) -> None:
    _update_task(plan, action.task_id, linked_issue=action.issue_id)


# ---- 关联对象与关键文件 ----


def _link_issue(plan: Plan, op: Op, action: LinkIssue) -> None:
    plan.related_issues = union_add(plan.related_issues, [action.issue_id])


def _unlink_issue(plan: Plan, op: Op, action: UnlinkIssue) -> None:
    if action.issue_id not in plan.related_issues:
        raise ActionRejected(
            OutcomeKind.UNKNOWN_OBJECT_REFERENCE,
            f"issue {action.issue_id} is not linked",
        )
    plan.related_issues = remove_members(plan.related_issues, [action.issue_id])


def _link_patch(plan: Plan, op: Op, action: LinkPatch) -> None:
    plan.related_patches = union_add(plan.related_patches, [action.patch_id])


def _unlink_patch(plan: Plan, op: Op, action: UnlinkPatch) -> None:
    if action.patch_id not in plan.related_patches:
        raise ActionRejected(
            OutcomeKind.UNKNOWN_OBJECT_REFERENCE,
            f"patch {action.patch_id} is not linked",
        )
    plan.related_patches = remove_members(plan.related_patches, [action.patch_id])


def _add_critical_file(plan: Plan, op: Op, action: AddCriticalFile) -> None:
    plan.critical_files = union_add(plan.critical_files, [action.path])


def _remove_critical_file(plan: Plan, op: Op, action: RemoveCriticalFile) -> None:
    plan.critical_files = remove_members(plan.critical_files, [action.path])


# ---- 讨论 ----


def _add_comment(plan: Plan, op: Op, action: AddComment) -> None:
    if action.reply_to is not None and action.reply_to not in plan.thread:
        raise ActionRejected(
            OutcomeKind.UNKNOWN_COMMENT_ID,
            f"comment {action.reply_to} does not exist",
        )
    plan.thread.comment(
        op.id,
        op.author,
        op.timestamp,
        action.body,
        reply_to=action.reply_to,
        embeds=action.embeds,
    )


def _edit_comment(plan: Plan, op: Op, action: EditComment) -> None:
    edited = plan.thread.edit(
        action.comment_id,
        op.author,
        op.timestamp,
        action.body,
        action.embeds,
    )
    if not edited:
        log.debug("redacted_comment_edit_ignored", op_id=op.id, comment_id=action.comment_id)


def _redact_comment(plan: Plan, op: Op, action: RedactComment) -> None:
    plan.thread.redact(action.comment_id)


# ---- 元数据 ----


def _label(plan: Plan, op: Op, action: Label) -> None:
    plan.labels = union_add(plan.labels, action.labels)


def _unlabel(plan: Plan, op: Op, action: Unlabel) -> None:
    plan.labels = remove_members(plan.labels, action.labels)


def _assign(plan: Plan, op: Op, action: Assign) -> None:
    plan.assignees = union_add(plan.assignees, action.assignees)


def _unassign(plan: Plan, op: Op, action: Unassign) -> None:
    plan.assignees = remove_members(plan.assignees, action.assignees)


_HANDLERS: dict[str, Callable[[Plan, Op, Action], None]] = {
    "open": _reopen,
    "edit.title": _edit_title,
    "edit.description": _edit_description,
    "status": _set_status,
    "task.add": _add_task,
    "task.edit": _edit_task,
    "task.status": _set_task_status,
    "task.linkCommit": _link_task_to_commit,
    "task.remove": _remove_task,
    "task.reorder": _reorder_tasks,
    "task.blockedBy": _set_task_blocked_by,
    "task.linkIssue": _link_task_to_issue,
    "link.issue": _link_issue,
    "unlink.issue": _unlink_issue,
    "link.patch": _link_patch,
    "unlink.patch": _unlink_patch,
    "criticalFile.add": _add_critical_file,
    "criticalFile.remove": _remove_critical_file,
    "comment": _add_comment,
    "comment.edit": _edit_comment,
    "comment.redact": _redact_comment,
    "label": _label,
    "unlabel": _unlabel,
    "assign": _assign,
    "unassign": _unassign,
}


# ---- 折叠 ----


def _step(
    plan: Plan | None,
    op: Op,
    oracle: AuthorizationOracle,
) -> tuple[Plan | None, ActionOutcome]:
    """对归约器独占的 plan 应用一个 operation（就地修改）"""
    outcome = ActionOutcome(op_id=op.id, action_type=op.action_type, author=op.author)
    action = op.action

    try:
        if action is None:
            raise ActionRejected(OutcomeKind.MALFORMED, op.malformed or "undecodable action")

        if plan is None:
            if not isinstance(action, Open):
                raise ActionRejected(
                    OutcomeKind.UNINITIALIZED_PLAN,
                    f"{action.type} before the plan was opened",
                )
            authorize(action, op.author, None, oracle)
            plan = Plan.open(
                op.id,
                op.author,
                op.timestamp,
                action.title,
                action.description,
                action.embeds,
            )
            return plan, outcome

        authorize(action, op.author, plan, oracle)
        if action.type in IDENTIFIER_PRODUCING_TYPES:
            _ensure_fresh_identifier(plan, op.id)
        _HANDLERS[action.type](plan, op, action)
    except ActionRejected as exc:
        log.debug(
            "plan_action_rejected",
            op_id=op.id,
            action=op.action_type,
            kind=exc.kind.value,
            reason=exc.reason,
        )
        outcome = outcome.model_copy(update={"kind": exc.kind, "reason": exc.reason})

    return plan, outcome


def apply_op(
    plan: Plan | None,
    op: Op,
    oracle: AuthorizationOracle | None = None,
) -> tuple[Plan | None, ActionOutcome]:
    """应用单个 operation，返回新的 plan 与该 operation 的结果

    传入的 plan 不会被修改。oracle 缺省时使用没有 delegate 的 DelegateAuthorizer，
    即只有 plan 作者可以执行 AUTHOR_OR_DELEGATE 类别的 action。
    """
    working = plan.model_copy(deep=True) if plan is not None else None
    return _step(working, op, oracle or DelegateAuthorizer())


def reduce(
    initial: Plan | None,
    ops: Iterable[Op],
    oracle: AuthorizationOracle | None = None,
) -> ReduceResult:
    """按顺序折叠 operation 序列

    Args:
        initial: 起始状态；None 表示从空开始，第一个有效 action 必须是 open
        ops: 已确定性全序排列的 operation
        oracle: 授权查询

    Returns:
        ReduceResult，包含最终 plan 与每个 operation 的结果
    """
    start_time = time.monotonic()
    oracle = oracle or DelegateAuthorizer()

    plan = initial.model_copy(deep=True) if initial is not None else None
    outcomes: list[ActionOutcome] = []
    for op in ops:
        plan, outcome = _step(plan, op, oracle)
        outcomes.append(outcome)

    result = ReduceResult(plan=plan, outcomes=outcomes)
    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    log.info(
        "plan_reduced",
        plan_id=plan.id if plan is not None else None,
        op_count=len(outcomes),
        applied=result.applied_count,
        rejected=len(outcomes) - result.applied_count,
        elapsed_ms=elapsed_ms,
    )
    return result


def load_plan(
    op_log: OperationLog,
    plan_id: str,
    oracle: AuthorizationOracle | None = None,
) -> ReduceResult:
    """从 operation 日志读取并归约一个 plan"""
    result = reduce(None, op_log.operations(plan_id), oracle)
    if result.plan is None:
        log.warning("plan_never_opened", plan_id=plan_id)
    elif result.plan.id != plan_id:
        log.warning("plan_id_mismatch", plan_id=plan_id, opened_by=result.plan.id)
    return result
