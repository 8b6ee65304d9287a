"""按状态统计 plan 数量"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .models.enums import PlanStatus
from .models.plan import Plan


class PlanCounts(BaseModel):
    """各状态的 plan 数量，序列化为 camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    draft: int = 0
    approved: int = 0
    in_progress: int = 0
    completed: int = 0
    archived: int = 0

    @property
    def total(self) -> int:
        return self.draft + self.approved + self.in_progress + self.completed + self.archived

    @property
    def active(self) -> int:
        """未归档的 plan 数量"""
        return self.total - self.archived


_FIELD_BY_STATUS: dict[PlanStatus, str] = {
    PlanStatus.DRAFT: "draft",
    PlanStatus.APPROVED: "approved",
    PlanStatus.IN_PROGRESS: "in_progress",
    PlanStatus.COMPLETED: "completed",
    PlanStatus.ARCHIVED: "archived",
}


def count_plans(plans: Iterable[Plan]) -> PlanCounts:
    counts = {name: 0 for name in _FIELD_BY_STATUS.values()}
    for plan in plans:
        counts[_FIELD_BY_STATUS[plan.status]] += 1
    return PlanCounts(**counts)
