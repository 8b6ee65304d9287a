"""Plan Action 定义 -- 以 type 字段区分的 tagged union

每个 action 对应一种 JSON payload，字段名为 camelCase。
AddComment 与 AddTask 会产生新标识（评论 ID / 任务 ID 等于所在 operation ID）。

注意：EditTask 是部分编辑。未出现的字段保持不变；description / estimate
显式传入 null 表示清空，通过 model_fields_set 区分两者。
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter
from pydantic.alias_generators import to_camel

from .common import CommentId, CommitHash, Embed, Identity, ObjectId, TaskId
from .enums import PlanStatus

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _ActionBase(BaseModel):
    """action 公共配置：camelCase 别名、不可变"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---- Plan 级别 ----


class Open(_ActionBase):
    """创建 plan（必须是第一个 action）"""

    type: Literal["open"] = "open"
    title: NonEmptyStr
    description: str = ""
    embeds: list[Embed] = Field(default_factory=list)


class EditTitle(_ActionBase):
    type: Literal["edit.title"] = "edit.title"
    title: NonEmptyStr


class EditDescription(_ActionBase):
    type: Literal["edit.description"] = "edit.description"
    description: str
    embeds: list[Embed] = Field(default_factory=list)


class SetStatus(_ActionBase):
    type: Literal["status"] = "status"
    status: PlanStatus


# ---- 任务 ----


class AddTask(_ActionBase):
    """添加任务，任务 ID 为所在 operation ID"""

    type: Literal["task.add"] = "task.add"
    subject: NonEmptyStr
    description: str | None = None
    estimate: str | None = None
    affected_files: list[str] = Field(default_factory=list)


class EditTask(_ActionBase):
    """部分编辑任务"""

    type: Literal["task.edit"] = "task.edit"
    task_id: TaskId
    subject: NonEmptyStr | None = None
    description: str | None = None
    estimate: str | None = None
    affected_files: list[str] | None = None


class SetTaskStatus(_ActionBase):
    """旧版任务状态 action

    为兼容历史数据而保留：无论 payload 内容如何，应用时都是 no-op。
    任务是否完成只由 linked_commit 决定。
    """

    type: Literal["task.status"] = "task.status"
    task_id: Any = None
    status: Any = None


class LinkTaskToCommit(_ActionBase):
    """关联提交，标记任务完成"""

    type: Literal["task.linkCommit"] = "task.linkCommit"
    task_id: TaskId
    commit: CommitHash


class RemoveTask(_ActionBase):
    type: Literal["task.remove"] = "task.remove"
    task_id: TaskId


class ReorderTasks(_ActionBase):
    type: Literal["task.reorder"] = "task.reorder"
    order: list[TaskId]


class SetTaskBlockedBy(_ActionBase):
    """整体替换任务的前置任务列表"""

    type: Literal["task.blockedBy"] = "task.blockedBy"
    task_id: TaskId
    blocked_by: list[TaskId]


class LinkTaskToIssue(_ActionBase):
    type: Literal["task.linkIssue"] = "task.linkIssue"
    task_id: TaskId
    issue_id: ObjectId


# ---- 关联对象与关键文件 ----


class LinkIssue(_ActionBase):
    type: Literal["link.issue"] = "link.issue"
    issue_id: ObjectId


class UnlinkIssue(_ActionBase):
    type: Literal["unlink.issue"] = "unlink.issue"
    issue_id: ObjectId


class LinkPatch(_ActionBase):
    type: Literal["link.patch"] = "link.patch"
    patch_id: ObjectId


class UnlinkPatch(_ActionBase):
    type: Literal["unlink.patch"] = "unlink.patch"
    patch_id: ObjectId


class AddCriticalFile(_ActionBase):
    type: Literal["criticalFile.add"] = "criticalFile.add"
    path: NonEmptyStr


class RemoveCriticalFile(_ActionBase):
    type: Literal["criticalFile.remove"] = "criticalFile.remove"
    path: NonEmptyStr


# ---- 讨论 ----


class AddComment(_ActionBase):
    """发表评论，评论 ID 为所在 operation ID"""

    type: Literal["comment"] = "comment"
    body: str
    reply_to: CommentId | None = None
    embeds: list[Embed] = Field(default_factory=list)


class EditComment(_ActionBase):
    type: Literal["comment.edit"] = "comment.edit"
    comment_id: CommentId
    body: str
    embeds: list[Embed] | None = None


class RedactComment(_ActionBase):
    type: Literal["comment.redact"] = "comment.redact"
    comment_id: CommentId


# ---- 元数据（仅 delegate）----


class Label(_ActionBase):
    """添加标签（并集）"""

    type: Literal["label"] = "label"
    labels: list[NonEmptyStr]


class Unlabel(_ActionBase):
    type: Literal["unlabel"] = "unlabel"
    labels: list[NonEmptyStr]


class Assign(_ActionBase):
    """添加负责人（并集）"""

    type: Literal["assign"] = "assign"
    assignees: list[Identity]


class Unassign(_ActionBase):
    type: Literal["unassign"] = "unassign"
    assignees: list[Identity]


Action = Annotated[
    Open
    | EditTitle
    | EditDescription
    | SetStatus
    | AddTask
    | EditTask
    | SetTaskStatus
    | LinkTaskToCommit
    | RemoveTask
    | ReorderTasks
    | SetTaskBlockedBy
    | LinkTaskToIssue
    | LinkIssue
    | UnlinkIssue
    | LinkPatch
    | UnlinkPatch
    | AddCriticalFile
    | RemoveCriticalFile
    | AddComment
    | EditComment
    | RedactComment
    | Label
    | Unlabel
    | Assign
    | Unassign,
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)

# 会产生新标识的 action 类型
IDENTIFIER_PRODUCING_TYPES: frozenset[str] = frozenset({"comment", "task.add"})
