"""Operation 信封与 action 编解码

Op 是归约器的输入单元：一个 action 加上作者、时间戳、operation ID。
解码失败的 operation 仍然占据序列中的位置，归约器会把它记录为 malformed。
时间戳只用于展示，归约时从不比较。
"""

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..exceptions import MalformedActionError
from .actions import ACTION_ADAPTER, Action
from .common import Identity, OperationId


class Op(BaseModel):
    """单个已排序的 operation"""

    id: OperationId = Field(description="operation ID（git 对象 ID）")
    author: Identity = Field(description="操作者身份")
    timestamp: datetime = Field(description="操作时间，仅用于展示")
    action: Action | None = Field(default=None, description="解码后的 action")
    malformed: str | None = Field(default=None, description="解码失败原因")
    raw_type: str | None = Field(default=None, description="解码失败时 payload 中的 type")

    @model_validator(mode="after")
    def _check_action_or_error(self) -> "Op":
        if (self.action is None) == (self.malformed is None):
            raise ValueError("Op 必须且只能包含 action 或 malformed 之一")
        return self

    @property
    def action_type(self) -> str:
        if self.action is not None:
            return self.action.type
        return self.raw_type or "unknown"


def _describe_errors(exc: ValidationError) -> str:
    """把 ValidationError 压成单行：loc: msg; loc: msg"""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def decode_action(payload: Mapping[str, Any] | str | bytes) -> Action:
    """把存储层的 payload 解码为 Action

    Args:
        payload: JSON 文本或已解析的 dict

    Raises:
        MalformedActionError: payload 不是合法的 action
    """
    try:
        if isinstance(payload, (str, bytes)):
            return ACTION_ADAPTER.validate_json(payload)
        return ACTION_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise MalformedActionError(
            f"无法解码 action: {_describe_errors(exc)}", payload
        ) from exc


def encode_action(action: Action) -> dict[str, Any]:
    """把 Action 编码为 camelCase 的 JSON 兼容 dict

    只输出显式设置过的字段，保留部分编辑中显式的 null。
    """
    data = action.model_dump(mode="json", by_alias=True, exclude_unset=True)
    data.pop("type", None)
    return {"type": action.type, **data}


def _peek_type(payload: Mapping[str, Any] | str | bytes) -> str | None:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return None
    if isinstance(payload, Mapping):
        raw = payload.get("type")
        return raw if isinstance(raw, str) else None
    return None


def decode_op(
    op_id: str,
    author: str,
    timestamp: datetime,
    payload: Mapping[str, Any] | str | bytes,
) -> Op:
    """解码一个 operation，失败时返回携带 malformed 原因的 Op（不抛异常）"""
    try:
        action = decode_action(payload)
    except MalformedActionError as exc:
        return Op(
            id=op_id,
            author=author,
            timestamp=timestamp,
            malformed=str(exc),
            raw_type=_peek_type(payload),
        )
    return Op(id=op_id, author=author, timestamp=timestamp, action=action)
