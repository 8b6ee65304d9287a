"""Plan COB 异常体系

归约过程中的单个 action 被拒绝时抛出 ActionRejected，由折叠循环捕获并记录为
ActionOutcome，不会中断后续 action 的处理。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.enums import OutcomeKind


class PlanError(Exception):
    """Plan 包基础异常"""


class ActionRejected(PlanError):
    """单个 action 被拒绝

    该异常只在归约器内部流转，折叠循环将其转换为对应 kind 的 ActionOutcome。
    """

    def __init__(self, kind: "OutcomeKind", reason: str) -> None:
        """
        Args:
            kind: 拒绝类别（不能是 APPLIED）
            reason: 面向用户的拒绝原因
        """
        if kind == "applied":
            raise ValueError("ActionRejected 不能使用 APPLIED 类别")
        super().__init__(f"{kind.value}: {reason}")
        self.kind = kind
        self.reason = reason


class MalformedActionError(PlanError):
    """action payload 解码失败"""

    def __init__(self, message: str, payload: object = None) -> None:
        super().__init__(message)
        self.payload = payload


class IdResolutionError(PlanError):
    """短前缀 ID 解析失败基类"""

    def __init__(self, message: str, prefix: str) -> None:
        super().__init__(message)
        self.prefix = prefix


class InvalidIdPrefixError(IdResolutionError, ValueError):
    """前缀过短或包含非十六进制字符"""


class IdNotFoundError(IdResolutionError, LookupError):
    """没有任何候选 ID 以该前缀开头"""


class AmbiguousIdError(IdResolutionError, LookupError):
    """两个及以上候选 ID 共享该前缀

    调用方需要向用户列出全部 matches。
    """

    def __init__(self, prefix: str, matches: list[str]) -> None:
        super().__init__(
            f"前缀 '{prefix}' 有歧义，匹配到 {len(matches)} 个 ID: {', '.join(matches)}",
            prefix,
        )
        self.matches = matches
