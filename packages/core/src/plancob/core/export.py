"""Plan 导出 -- Markdown / JSON

Markdown 面向人阅读：任务用 [x] / [ ] 复选框表示是否已关联提交，
被跳过的 action 汇总在文末，调用方其余情况下把收敛后的 plan 视为权威状态。
"""

from collections.abc import Iterable

from .id_resolution import short_id
from .models.outcome import ActionOutcome
from .models.plan import Plan, Task


def _task_lines(task: Task) -> list[str]:
    checkbox = "[x]" if task.is_done else "[ ]"
    estimate = f" _({task.estimate})_" if task.estimate else ""
    lines = [f"- {checkbox} {task.subject}{estimate}"]

    if task.description:
        lines.append(f"  - {task.description}")
    if task.blocked_by:
        blockers = ", ".join(short_id(b) for b in task.blocked_by)
        lines.append(f"  - Blocked by: {blockers}")
    if task.linked_issue:
        lines.append(f"  - Issue: {task.linked_issue}")
    if task.linked_commit:
        lines.append(f"  - Commit: {task.linked_commit}")
    if task.affected_files:
        files = ", ".join(f"`{path}`" for path in task.affected_files)
        lines.append(f"  - Files: {files}")
    return lines


def _section(title: str, items: Iterable[str]) -> list[str]:
    items = list(items)
    if not items:
        return []
    return ["", f"## {title}", "", *(f"- {item}" for item in items)]


def _skipped_line(outcome: ActionOutcome) -> str:
    line = f"`{short_id(outcome.op_id)}` {outcome.action_type}: {outcome.kind.value}"
    if outcome.reason:
        # 原因可能跨行，压成一行以保持列表结构
        line += f" ({' '.join(outcome.reason.split())})"
    return line


def render_markdown(plan: Plan, outcomes: Iterable[ActionOutcome] | None = None) -> str:
    """把 plan 渲染为 Markdown

    Args:
        plan: 归约后的 plan
        outcomes: 归约结果；其中被拒绝的 action 列在 "Skipped actions" 一节
    """
    lines = [
        f"# {plan.title}",
        "",
        f"**ID:** {plan.id}",
        f"**Status:** {plan.status.label}",
        f"**Author:** {plan.author}",
    ]
    if plan.labels:
        lines.append(f"**Labels:** {', '.join(sorted(plan.labels))}")
    if plan.assignees:
        lines.append(f"**Assignees:** {', '.join(sorted(plan.assignees))}")

    if plan.description:
        lines += ["", "## Description", "", plan.description]

    done = len(plan.done_tasks())
    lines += ["", f"## Tasks ({done}/{len(plan.tasks)})", ""]
    for task in plan.tasks:
        lines += _task_lines(task)

    lines += _section("Linked Issues", sorted(plan.related_issues))
    lines += _section("Linked Patches", sorted(plan.related_patches))
    lines += _section("Critical Files", (f"`{p}`" for p in sorted(plan.critical_files)))

    if outcomes is not None:
        lines += _section(
            "Skipped actions",
            (_skipped_line(o) for o in outcomes if not o.applied),
        )

    return "\n".join(lines) + "\n"


def render_json(plan: Plan) -> str:
    """渲染为 JSON；集合字段已排序，相同 plan 的输出逐字节一致"""
    return plan.model_dump_json(indent=2)
