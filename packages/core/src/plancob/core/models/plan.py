"""Plan / Task 领域模型

Plan 是 action 序列折叠后的值，每次归约都会产生一个新的 Plan，不存在进程级共享状态。
任务没有可变的状态字段：
- done：linked_commit 存在
- unblocked：blocked_by 中的每个任务都已 done
两者都是派生查询，不会被冗余存储。
"""

from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from .common import CommitHash, Embed, Identity, ObjectId, OperationId, TaskId
from .enums import PlanStatus
from .thread import Comment, Thread


class Task(BaseModel):
    """Plan 中的单个任务，ID 等于创建它的 operation ID"""

    id: TaskId = Field(description="创建该任务的 operation ID")
    subject: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="详细描述")
    estimate: str | None = Field(default=None, description="工时估计（自由文本，如 2h / 1d）")
    blocked_by: list[TaskId] = Field(default_factory=list, description="前置任务 ID")
    affected_files: list[str] = Field(default_factory=list, description="涉及的文件")
    linked_issue: ObjectId | None = Field(default=None, description="关联的 issue")
    linked_commit: CommitHash | None = Field(
        default=None,
        description="关联的提交，存在即表示任务已完成",
    )
    author: Identity
    created_at: datetime

    @property
    def is_done(self) -> bool:
        return self.linked_commit is not None

    @property
    def has_blockers(self) -> bool:
        return bool(self.blocked_by)


class Plan(BaseModel):
    """Plan 聚合根

    tasks 只包含未删除的任务，顺序即最近一次 reorder 的结果（无 reorder 时为创建顺序）；
    被删除的任务移入 removed_tasks，ID 仍然保留，历史引用依然可以解析。
    集合字段序列化时排序，保证 model_dump_json() 在任何进程逐字节一致。
    """

    id: OperationId = Field(description="创建 plan 的 open operation ID")
    title: str
    description: str
    status: PlanStatus = Field(default=PlanStatus.DRAFT)
    tasks: list[Task] = Field(default_factory=list)
    removed_tasks: dict[TaskId, Task] = Field(default_factory=dict)
    related_issues: set[ObjectId] = Field(default_factory=set)
    related_patches: set[ObjectId] = Field(default_factory=set)
    critical_files: set[str] = Field(default_factory=set)
    labels: set[str] = Field(default_factory=set)
    assignees: set[Identity] = Field(default_factory=set)
    thread: Thread
    author: Identity
    created_at: datetime

    @field_serializer(
        "related_issues",
        "related_patches",
        "critical_files",
        "labels",
        "assignees",
    )
    def _serialize_sorted(self, value: set[str]) -> list[str]:
        return sorted(value)

    @classmethod
    def open(
        cls,
        op_id: str,
        author: str,
        timestamp: datetime,
        title: str,
        description: str,
        embeds: list[Embed] | None = None,
    ) -> "Plan":
        """由 open action 创建 Plan，描述同时作为线程根评论"""
        root = Comment(
            id=op_id,
            author=author,
            body=description,
            embeds=list(embeds or []),
            timestamp=timestamp,
        )
        return cls(
            id=op_id,
            title=title,
            description=description,
            thread=Thread.new(root),
            author=author,
            created_at=timestamp,
        )

    # ---- 任务查询 ----

    def task(self, task_id: str) -> Task | None:
        """按 ID 查询未删除的任务"""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def known_task(self, task_id: str) -> Task | None:
        """按 ID 查询任务，包括已删除的任务"""
        return self.task(task_id) or self.removed_tasks.get(task_id)

    def is_live(self, task_id: str) -> bool:
        return self.task(task_id) is not None

    def is_removed(self, task_id: str) -> bool:
        return task_id in self.removed_tasks

    def task_ids(self) -> list[str]:
        return [t.id for t in self.tasks]

    def done_tasks(self) -> list[Task]:
        return [t for t in self.tasks if t.is_done]

    def unblocked_tasks(self) -> list[Task]:
        """所有前置任务均已完成的任务（含已完成任务本身）"""
        from ..dependencies import unblocked_tasks

        return unblocked_tasks(self)

    def ready_tasks(self) -> list[Task]:
        """可以开始的任务：未完成且未被阻塞"""
        return [t for t in self.unblocked_tasks() if not t.is_done]

    def execution_batches(self) -> list[list[str]]:
        from ..dependencies import execution_batches

        return execution_batches(self)

    def completion_percentage(self) -> float:
        if not self.tasks:
            return 0.0
        return len(self.done_tasks()) / len(self.tasks) * 100.0

    def all_tasks_complete(self) -> bool:
        return bool(self.tasks) and all(t.is_done for t in self.tasks)

    # ---- 讨论线程 ----

    def root(self) -> Comment:
        """线程根评论（plan 描述）"""
        return self.thread.root()

    def comments(self) -> Iterator[Comment]:
        return self.thread.comments()
