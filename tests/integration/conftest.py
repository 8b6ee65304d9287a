"""集成测试共享 fixture -- 以 JSON payload 保存的 operation 日志"""

import json
from datetime import datetime, timedelta
from typing import Any

import pytest
from plancob.core.models import Op, decode_op


class JsonOperationLog:
    """内存 operation 日志，payload 以 JSON 文本保存，读取时解码"""

    def __init__(self) -> None:
        self._entries: dict[str, list[tuple[str, str, datetime, str]]] = {}

    def append(
        self,
        plan_id: str,
        op_id: str,
        author: str,
        timestamp: datetime,
        payload: dict[str, Any],
    ) -> None:
        self._entries.setdefault(plan_id, []).append(
            (op_id, author, timestamp, json.dumps(payload))
        )

    def operations(self, plan_id: str) -> list[Op]:
        return [
            decode_op(op_id, author, timestamp, payload)
            for op_id, author, timestamp, payload in self._entries.get(plan_id, [])
        ]


@pytest.fixture
def release_log(oid, ts, author, delegate, stranger) -> JsonOperationLog:
    """一个多作者的发布计划历史，plan ID 为 oid(1)"""
    history: list[tuple[str, dict[str, Any]]] = [
        (author, {"type": "open", "title": "Release 1.0", "description": "Ship it"}),
        (author, {"type": "task.add", "subject": "Freeze API", "estimate": "1d"}),
        (author, {"type": "task.add", "subject": "Write changelog"}),
        (delegate, {"type": "task.add", "subject": "Tag release", "affectedFiles": ["VERSION"]}),
        (author, {"type": "task.blockedBy", "taskId": oid(4), "blockedBy": [oid(2), oid(3)]}),
        (stranger, {"type": "comment", "body": "Can I help?"}),
        (author, {"type": "comment", "body": "Sure", "replyTo": oid(6)}),
        (stranger, {"type": "label", "labels": ["release"]}),
        (delegate, {"type": "label", "labels": ["release"]}),
        (author, {"type": "link.issue", "issueId": "a" * 40}),
        (author, {"type": "task.status", "taskId": oid(2), "status": "completed"}),
        (author, {"type": "task.linkCommit", "taskId": oid(2), "commit": "c" * 40}),
        (delegate, {"type": "task.blockedBy", "taskId": oid(2), "blockedBy": [oid(4)]}),
        (author, {"type": "task.frobnicate"}),
        (author, {"type": "task.linkCommit", "taskId": oid(3), "commit": "d" * 40}),
        (author, {"type": "status", "status": "inProgress"}),
        (stranger, {"type": "comment.edit", "commentId": oid(6), "body": "Can I help with docs?"}),
        (author, {"type": "task.reorder", "order": [oid(4)]}),
    ]

    log = JsonOperationLog()
    for n, (actor, payload) in enumerate(history, start=1):
        log.append(oid(1), oid(n), actor, ts + timedelta(minutes=n), payload)
    return log
