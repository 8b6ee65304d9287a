"""Discussion 线程模型 -- Plan 的评论树

合并规则：
- comment 追加，单调增长；reply_to 必须指向已存在的评论
- comment.edit 按评论作者限定，后写者胜出，保留编辑历史
- comment.redact 清空正文与编辑历史并标记删除，评论 ID 仍然保留；删除后的编辑被忽略

线程方法假设调用方已完成引用校验（归约器负责），未知 ID 抛出 KeyError。
"""

from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, Field

from .common import CommentId, Embed, Identity


class CommentEdit(BaseModel):
    """评论的一次编辑记录"""

    author: Identity
    timestamp: datetime
    body: str
    embeds: list[Embed] = Field(default_factory=list)


class Comment(BaseModel):
    """单条评论"""

    id: CommentId = Field(description="创建该评论的 operation ID")
    author: Identity
    body: str
    reply_to: CommentId | None = Field(default=None, description="回复的评论 ID")
    embeds: list[Embed] = Field(default_factory=list)
    timestamp: datetime
    edits: list[CommentEdit] = Field(default_factory=list, description="编辑历史")
    redacted: bool = Field(default=False)

    @property
    def edited(self) -> bool:
        return bool(self.edits)


class Thread(BaseModel):
    """评论线程，按插入顺序保存全部评论（含已删除评论的占位）"""

    entries: dict[CommentId, Comment] = Field(default_factory=dict)

    @classmethod
    def new(cls, root: Comment) -> "Thread":
        """以根评论（plan 描述）创建线程"""
        return cls(entries={root.id: root})

    @property
    def root_id(self) -> CommentId:
        return next(iter(self.entries))

    def root(self) -> Comment:
        return self.entries[self.root_id]

    def get(self, comment_id: str) -> Comment | None:
        return self.entries.get(comment_id)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def comments(self) -> Iterator[Comment]:
        """遍历可见评论（跳过已删除的评论）"""
        return (c for c in self.entries.values() if not c.redacted)

    def replies(self, comment_id: str) -> list[Comment]:
        """查询直接回复某条评论的可见评论"""
        return [c for c in self.comments() if c.reply_to == comment_id]

    def comment(
        self,
        comment_id: str,
        author: str,
        timestamp: datetime,
        body: str,
        reply_to: str | None = None,
        embeds: list[Embed] | None = None,
    ) -> Comment:
        """追加评论"""
        if reply_to is not None and reply_to not in self.entries:
            raise KeyError(reply_to)
        comment = Comment(
            id=comment_id,
            author=author,
            body=body,
            reply_to=reply_to,
            embeds=list(embeds or []),
            timestamp=timestamp,
        )
        self.entries[comment_id] = comment
        return comment

    def edit(
        self,
        comment_id: str,
        author: str,
        timestamp: datetime,
        body: str,
        embeds: list[Embed] | None = None,
    ) -> bool:
        """编辑评论正文

        Returns:
            True 表示已修改；评论已删除时返回 False（编辑被忽略）
        """
        comment = self.entries[comment_id]
        if comment.redacted:
            return False
        new_embeds = list(embeds) if embeds is not None else comment.embeds
        self.entries[comment_id] = comment.model_copy(
            update={
                "body": body,
                "embeds": new_embeds,
                "edits": [
                    *comment.edits,
                    CommentEdit(
                        author=author,
                        timestamp=timestamp,
                        body=body,
                        embeds=new_embeds,
                    ),
                ],
            }
        )
        return True

    def redact(self, comment_id: str) -> None:
        """删除评论：清空正文、附件与编辑历史，保留 ID 占位"""
        comment = self.entries[comment_id]
        self.entries[comment_id] = comment.model_copy(
            update={"body": "", "embeds": [], "edits": [], "redacted": True}
        )
