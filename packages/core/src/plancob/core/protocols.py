"""外部协作者接口定义

归约器只消费这些接口，不实现它们：
- AuthorizationOracle：身份与 delegate 成员关系查询
- OperationLog：存储层提供的、已按因果/拓扑顺序全序排列的 operation 序列

使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from .models.enums import ActionClass
from .models.op import Op
from .models.plan import Plan


class AuthorizationOracle(Protocol):
    """授权查询接口"""

    def is_authorized(
        self,
        identity: str,
        action_class: ActionClass,
        plan: Plan | None,
    ) -> bool:
        """判断 identity 是否可以执行该类别的 action

        plan 为 None 表示 plan 尚未创建（只会询问 ANYONE 类别）。
        COMMENT_AUTHOR 类别由归约器对照评论作者判断，不会交给 oracle。
        """
        ...


class OperationLog(Protocol):
    """operation 日志接口（append-only，顺序由存储层决定）"""

    def operations(self, plan_id: str) -> list[Op]:
        """按确定性全序返回 plan 的全部 operation（第一个应为 open）"""
        ...
