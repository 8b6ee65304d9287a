"""归约结果模型

每个 action 对应一个 ActionOutcome；被拒绝的 action 只记录，不中断折叠。
调用方（CLI / 导出层）用 ReduceResult.rejected() 向用户汇总被跳过的 action，
其余情况下把收敛后的 Plan 视为权威状态。
"""

from collections import Counter

from pydantic import BaseModel, Field

from .common import Identity, OperationId
from .enums import OutcomeKind
from .plan import Plan


class ActionOutcome(BaseModel):
    """单个 action 的归约结果"""

    op_id: OperationId
    action_type: str = Field(description="action 的 type 字段")
    author: Identity
    kind: OutcomeKind = Field(default=OutcomeKind.APPLIED)
    reason: str = Field(default="", description="拒绝原因，applied 时为空")

    @property
    def applied(self) -> bool:
        return self.kind == OutcomeKind.APPLIED


class ReduceResult(BaseModel):
    """一次完整折叠的结果

    plan 为 None 表示序列中从未出现合法的 open action。
    """

    plan: Plan | None = None
    outcomes: list[ActionOutcome] = Field(default_factory=list)

    def rejected(self) -> list[ActionOutcome]:
        return [o for o in self.outcomes if not o.applied]

    @property
    def applied_count(self) -> int:
        return sum(1 for o in self.outcomes if o.applied)

    def summary(self) -> dict[str, int]:
        """按拒绝类别统计被跳过的 action 数量"""
        counts = Counter(o.kind.value for o in self.rejected())
        return dict(sorted(counts.items()))
