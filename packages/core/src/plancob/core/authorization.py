"""Action 授权规则

静态规则表把每种 action 映射到一个授权类别：
- ANYONE：任何人（open、comment、旧版 task.status）
- AUTHOR_OR_DELEGATE：plan 作者或 delegate（编辑、任务、关联、关键文件）
- COMMENT_AUTHOR：评论作者本人（comment.edit / comment.redact）
- DELEGATE：仅 delegate（label / unlabel / assign / unassign）

plan 已存在时再次出现的 open 视为标题与描述的编辑，按 AUTHOR_OR_DELEGATE 处理。
"""

from collections.abc import Iterable

from .exceptions import ActionRejected
from .models.actions import Action
from .models.enums import ActionClass, OutcomeKind
from .models.plan import Plan
from .protocols import AuthorizationOracle

ACTION_CLASSES: dict[str, ActionClass] = {
    "open": ActionClass.ANYONE,
    "edit.title": ActionClass.AUTHOR_OR_DELEGATE,
    "edit.description": ActionClass.AUTHOR_OR_DELEGATE,
    "status": ActionClass.AUTHOR_OR_DELEGATE,
    "task.add": ActionClass.AUTHOR_OR_DELEGATE,
    "task.edit": ActionClass.AUTHOR_OR_DELEGATE,
    "task.linkCommit": ActionClass.AUTHOR_OR_DELEGATE,
    "task.remove": ActionClass.AUTHOR_OR_DELEGATE,
    "task.reorder": ActionClass.AUTHOR_OR_DELEGATE,
    "task.blockedBy": ActionClass.AUTHOR_OR_DELEGATE,
    "task.linkIssue": ActionClass.AUTHOR_OR_DELEGATE,
    "task.status": ActionClass.ANYONE,
    "link.issue": ActionClass.AUTHOR_OR_DELEGATE,
    "unlink.issue": ActionClass.AUTHOR_OR_DELEGATE,
    "link.patch": ActionClass.AUTHOR_OR_DELEGATE,
    "unlink.patch": ActionClass.AUTHOR_OR_DELEGATE,
    "criticalFile.add": ActionClass.AUTHOR_OR_DELEGATE,
    "criticalFile.remove": ActionClass.AUTHOR_OR_DELEGATE,
    "comment": ActionClass.ANYONE,
    "comment.edit": ActionClass.COMMENT_AUTHOR,
    "comment.redact": ActionClass.COMMENT_AUTHOR,
    "label": ActionClass.DELEGATE,
    "unlabel": ActionClass.DELEGATE,
    "assign": ActionClass.DELEGATE,
    "unassign": ActionClass.DELEGATE,
}


class DelegateAuthorizer:
    """基于 delegate 集合的 AuthorizationOracle 实现

    delegate 可以执行除 COMMENT_AUTHOR 以外的全部类别。
    """

    def __init__(self, delegates: Iterable[str] = ()) -> None:
        self._delegates = frozenset(delegates)

    @property
    def delegates(self) -> frozenset[str]:
        return self._delegates

    def is_delegate(self, identity: str) -> bool:
        return identity in self._delegates

    def is_authorized(
        self,
        identity: str,
        action_class: ActionClass,
        plan: Plan | None,
    ) -> bool:
        if action_class == ActionClass.ANYONE:
            return True
        if action_class == ActionClass.DELEGATE:
            return self.is_delegate(identity)
        if action_class == ActionClass.AUTHOR_OR_DELEGATE:
            if self.is_delegate(identity):
                return True
            return plan is not None and plan.author == identity
        # COMMENT_AUTHOR 由 authorize() 对照线程判断
        return False


def required_class(action: Action, plan: Plan | None) -> ActionClass:
    """查询 action 所需的授权类别"""
    if action.type == "open" and plan is not None:
        return ActionClass.AUTHOR_OR_DELEGATE
    return ACTION_CLASSES[action.type]


def authorize(
    action: Action,
    actor: str,
    plan: Plan | None,
    oracle: AuthorizationOracle,
) -> ActionClass:
    """校验 actor 是否可以执行 action

    Returns:
        生效的授权类别

    Raises:
        ActionRejected: UNAUTHORIZED；评论类 action 引用的评论不存在时为 UNKNOWN_COMMENT_ID
    """
    action_class = required_class(action, plan)

    if action_class == ActionClass.COMMENT_AUTHOR:
        comment_id = action.comment_id  # type: ignore[union-attr]
        comment = plan.thread.get(comment_id) if plan is not None else None
        if comment is None:
            raise ActionRejected(
                OutcomeKind.UNKNOWN_COMMENT_ID,
                f"comment {comment_id} does not exist",
            )
        if comment.author != actor:
            raise ActionRejected(
                OutcomeKind.UNAUTHORIZED,
                f"{actor} is not the author of comment {comment_id}",
            )
        return action_class

    if not oracle.is_authorized(actor, action_class, plan):
        raise ActionRejected(
            OutcomeKind.UNAUTHORIZED,
            f"{actor} is not authorized to apply {action.type} ({action_class.value})",
        )
    return action_class
