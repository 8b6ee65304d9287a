"""Plan COB Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .actions import (
    ACTION_ADAPTER,
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
from .common import CommentId, CommitHash, Embed, Identity, ObjectId, OperationId, TaskId
from .enums import ActionClass, OutcomeKind, PlanStatus
from .op import Op, decode_action, decode_op, encode_action
from .outcome import ActionOutcome, ReduceResult
from .plan import Plan, Task
from .thread import Comment, CommentEdit, Thread

__all__ = [
    # 枚举
    "PlanStatus",
    "OutcomeKind",
    "ActionClass",
    # 标识符
    "OperationId",
    "TaskId",
    "CommentId",
    "ObjectId",
    "CommitHash",
    "Identity",
    "Embed",
    # 线程
    "Thread",
    "Comment",
    "CommentEdit",
    # Plan
    "Plan",
    "Task",
    # Actions
    "Action",
    "ACTION_ADAPTER",
    "IDENTIFIER_PRODUCING_TYPES",
    "Open",
    "EditTitle",
    "EditDescription",
    "SetStatus",
    "AddTask",
    "EditTask",
    "SetTaskStatus",
    "LinkTaskToCommit",
    "RemoveTask",
    "ReorderTasks",
    "SetTaskBlockedBy",
    "LinkTaskToIssue",
    "LinkIssue",
    "UnlinkIssue",
    "LinkPatch",
    "UnlinkPatch",
    "AddCriticalFile",
    "RemoveCriticalFile",
    "AddComment",
    "EditComment",
    "RedactComment",
    "Label",
    "Unlabel",
    "Assign",
    "Unassign",
    # Op
    "Op",
    "decode_action",
    "decode_op",
    "encode_action",
    # 结果
    "ActionOutcome",
    "ReduceResult",
]
