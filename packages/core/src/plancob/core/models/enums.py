"""枚举定义

包含 PlanStatus、OutcomeKind、ActionClass 枚举。
任务没有独立的状态枚举：是否完成由 linked_commit 推导。
"""

from enum import StrEnum


class PlanStatus(StrEnum):
    """Plan 状态，单值字段，后写者胜出"""

    DRAFT = "draft"
    APPROVED = "approved"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        """人类可读名称，例如 in-progress"""
        return _STATUS_LABELS[self]

    @classmethod
    def parse(cls, text: str) -> "PlanStatus":
        """解析用户输入的状态名称（大小写不敏感，支持常见别名）

        Raises:
            ValueError: 无法识别的状态名称
        """
        key = text.strip().lower()
        try:
            return _STATUS_ALIASES[key]
        except KeyError:
            raise ValueError(f"unknown plan status: {text}") from None


_STATUS_LABELS: dict[PlanStatus, str] = {
    PlanStatus.DRAFT: "draft",
    PlanStatus.APPROVED: "approved",
    PlanStatus.IN_PROGRESS: "in-progress",
    PlanStatus.COMPLETED: "completed",
    PlanStatus.ARCHIVED: "archived",
}

_STATUS_ALIASES: dict[str, PlanStatus] = {
    "draft": PlanStatus.DRAFT,
    "approved": PlanStatus.APPROVED,
    "inprogress": PlanStatus.IN_PROGRESS,
    "in-progress": PlanStatus.IN_PROGRESS,
    "in_progress": PlanStatus.IN_PROGRESS,
    "completed": PlanStatus.COMPLETED,
    "complete": PlanStatus.COMPLETED,
    "done": PlanStatus.COMPLETED,
    "archived": PlanStatus.ARCHIVED,
    "archive": PlanStatus.ARCHIVED,
}


class OutcomeKind(StrEnum):
    """单个 action 的归约结果类别"""

    APPLIED = "applied"

    # 拒绝类别
    UNINITIALIZED_PLAN = "uninitializedPlan"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN_TASK_ID = "unknownTaskId"
    REMOVED_TASK_ID = "removedTaskId"
    UNKNOWN_COMMENT_ID = "unknownCommentId"
    UNKNOWN_OBJECT_REFERENCE = "unknownObjectReference"
    CYCLIC_DEPENDENCY = "cyclicDependency"
    INVALID_REORDER = "invalidReorder"
    MALFORMED = "malformed"


class ActionClass(StrEnum):
    """action 授权类别"""

    ANYONE = "anyone"
    AUTHOR_OR_DELEGATE = "authorOrDelegate"
    COMMENT_AUTHOR = "commentAuthor"
    DELEGATE = "delegate"
