"""导出与统计测试"""

import json

from plancob.core.counts import PlanCounts, count_plans
from plancob.core.export import render_json, render_markdown
from plancob.core.models import (
    ActionOutcome,
    AddCriticalFile,
    EditTitle,
    Label,
    LinkIssue,
    LinkPatch,
    LinkTaskToCommit,
    OutcomeKind,
    PlanStatus,
    SetStatus,
    SetTaskBlockedBy,
    decode_op,
)
from plancob.core.reducer import reduce

ISSUE = "a" * 40
PATCH = "b" * 40
COMMIT = "c" * 40


class TestRenderMarkdown:
    """Markdown 导出"""

    def test_header_and_tasks(self, plan_with_tasks, make_op, oid, delegate, oracle):
        plan = reduce(
            plan_with_tasks,
            [
                make_op(5, LinkTaskToCommit(task_id=oid(2), commit=COMMIT)),
                make_op(6, SetTaskBlockedBy(task_id=oid(4), blocked_by=[oid(3)])),
                make_op(7, SetStatus(status=PlanStatus.IN_PROGRESS)),
                make_op(8, Label(labels=["storage"]), author=delegate),
            ],
            oracle,
        ).plan

        text = render_markdown(plan)
        lines = text.splitlines()

        assert lines[0] == "# Migrate storage"
        assert f"**ID:** {oid(1)}" in lines
        assert "**Status:** in-progress" in lines
        assert "**Labels:** storage" in lines
        assert "## Description" in lines
        assert "Move plans to sqlite" in lines
        assert "## Tasks (1/3)" in lines
        assert "- [x] T1 _(2h)_" in lines
        assert "- [ ] T2" in lines
        assert "- [ ] T3" in lines
        assert "  - third" in lines
        assert "  - Blocked by: 0000000" in lines
        assert f"  - Commit: {COMMIT}" in lines
        assert text.endswith("\n")

    def test_link_sections(self, plan, make_op, oracle):
        plan = reduce(
            plan,
            [
                make_op(5, LinkIssue(issue_id=ISSUE)),
                make_op(6, LinkPatch(patch_id=PATCH)),
                make_op(7, AddCriticalFile(path="src/store.py")),
            ],
            oracle,
        ).plan

        lines = render_markdown(plan).splitlines()
        assert lines[lines.index("## Linked Issues") + 2] == f"- {ISSUE}"
        assert lines[lines.index("## Linked Patches") + 2] == f"- {PATCH}"
        assert lines[lines.index("## Critical Files") + 2] == "- `src/store.py`"

    def test_empty_sections_omitted(self, plan):
        text = render_markdown(plan)
        assert "## Linked Issues" not in text
        assert "## Skipped actions" not in text
        assert "## Tasks (0/0)" in text

    def test_skipped_actions(self, plan, make_op, stranger, oracle):
        result = reduce(
            plan,
            [
                make_op(5, EditTitle(title="ok")),
                make_op(6, EditTitle(title="nope"), author=stranger),
            ],
            oracle,
        )
        lines = render_markdown(result.plan, result.outcomes).splitlines()

        skipped = lines[lines.index("## Skipped actions") + 2 :]
        assert len(skipped) == 1
        assert skipped[0].startswith("- `0000000` edit.title: unauthorized (")

    def test_malformed_action_stays_one_bullet(self, plan, author, ts, oid, oracle):
        """解码失败的 action 在 Skipped actions 中只占一行"""
        bad = decode_op(oid(9), author, ts, {"type": "nope"})
        result = reduce(plan, [bad], oracle)
        lines = render_markdown(result.plan, result.outcomes).splitlines()

        skipped = lines[lines.index("## Skipped actions") + 2 :]
        assert len(skipped) == 1
        assert skipped[0].startswith("- `0000000` nope: malformed (")

    def test_multiline_reason_flattened(self, plan, oid, author):
        outcome = ActionOutcome(
            op_id=oid(9),
            action_type="comment",
            author=author,
            kind=OutcomeKind.MALFORMED,
            reason="first\n    second",
        )
        text = render_markdown(plan, [outcome])
        assert "- `0000000` comment: malformed (first second)\n" in text

    def test_no_skipped_section_when_all_applied(self, plan, make_op, oracle):
        result = reduce(plan, [make_op(5, EditTitle(title="ok"))], oracle)
        assert "## Skipped actions" not in render_markdown(result.plan, result.outcomes)


class TestRenderJson:
    def test_sorted_and_parseable(self, plan, make_op, oracle):
        plan = reduce(
            plan,
            [
                make_op(5, LinkIssue(issue_id=PATCH)),
                make_op(6, LinkIssue(issue_id=ISSUE)),
            ],
            oracle,
        ).plan
        data = json.loads(render_json(plan))
        assert data["related_issues"] == [ISSUE, PATCH]
        assert data["status"] == "draft"


class TestCounts:
    """按状态统计"""

    def test_count_plans(self, plan, make_op, oracle):
        approved = reduce(plan, [make_op(5, SetStatus(status=PlanStatus.APPROVED))], oracle).plan
        archived = reduce(plan, [make_op(5, SetStatus(status=PlanStatus.ARCHIVED))], oracle).plan

        counts = count_plans([plan, plan, approved, archived])
        assert counts == PlanCounts(draft=2, approved=1, archived=1)
        assert counts.total == 4
        assert counts.active == 3

    def test_empty(self):
        counts = count_plans([])
        assert counts.total == 0
        assert counts.active == 0

    def test_camel_case_dump(self):
        counts = PlanCounts(in_progress=2)
        assert counts.model_dump(by_alias=True)["inProgress"] == 2
