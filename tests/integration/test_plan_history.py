"""多作者 plan 历史的端到端归约

从 JSON payload 日志加载、归约、导出，验证各副本收敛到同一状态。
"""

import pytest
from plancob.core.exceptions import AmbiguousIdError
from plancob.core.export import render_json, render_markdown
from plancob.core.id_resolution import resolve_id
from plancob.core.models import OutcomeKind, PlanStatus
from plancob.core.reducer import load_plan, reduce


class TestReleaseHistory:
    """发布计划历史"""

    def test_converged_state(self, release_log, oid, oracle):
        result = load_plan(release_log, oid(1), oracle)
        plan = result.plan

        assert plan.title == "Release 1.0"
        assert plan.status == PlanStatus.IN_PROGRESS
        assert plan.task_ids() == [oid(4), oid(2), oid(3)]
        assert plan.labels == {"release"}
        assert plan.related_issues == {"a" * 40}
        assert plan.task(oid(4)).blocked_by == [oid(2), oid(3)]
        assert plan.task(oid(2)).blocked_by == []
        assert [t.id for t in plan.ready_tasks()] == [oid(4)]
        assert plan.thread.get(oid(6)).body == "Can I help with docs?"
        assert [c.id for c in plan.thread.replies(oid(6))] == [oid(7)]

    def test_skipped_actions(self, release_log, oid, oracle):
        result = load_plan(release_log, oid(1), oracle)

        assert result.summary() == {
            "cyclicDependency": 1,
            "malformed": 1,
            "unauthorized": 1,
        }
        rejected = {o.op_id: o.kind for o in result.rejected()}
        assert rejected == {
            oid(8): OutcomeKind.UNAUTHORIZED,
            oid(13): OutcomeKind.CYCLIC_DEPENDENCY,
            oid(14): OutcomeKind.MALFORMED,
        }

    def test_replicas_converge(self, release_log, oid, oracle):
        """两个副本各自解码、归约同一日志，JSON 逐字节一致"""
        first = load_plan(release_log, oid(1), oracle)
        second = reduce(None, release_log.operations(oid(1)), oracle)
        assert render_json(first.plan) == render_json(second.plan)

    def test_incremental_equals_full(self, release_log, oid, oracle):
        """先归约前缀再继续，与一次性归约完整序列结果相同"""
        ops = release_log.operations(oid(1))
        full = reduce(None, ops, oracle)

        for split in range(len(ops) + 1):
            head = reduce(None, ops[:split], oracle)
            tail = reduce(head.plan, ops[split:], oracle)
            assert tail.plan == full.plan
            assert head.outcomes + tail.outcomes == full.outcomes

    def test_markdown_export(self, release_log, oid, oracle):
        result = load_plan(release_log, oid(1), oracle)
        text = render_markdown(result.plan, result.outcomes)

        assert "## Tasks (2/3)" in text
        assert "- [ ] Tag release" in text
        assert "- [x] Freeze API _(1d)_" in text
        skipped = text.split("## Skipped actions")[1].strip().splitlines()
        assert len(skipped) == 3

    def test_task_prefix_resolution(self, release_log, oid, oracle):
        """任务 ID 共享前缀时报告全部匹配"""
        plan = load_plan(release_log, oid(1), oracle).plan

        with pytest.raises(AmbiguousIdError) as exc_info:
            resolve_id("0000000", plan.task_ids())
        assert exc_info.value.matches == sorted(plan.task_ids())
        assert resolve_id(oid(3).upper(), plan.task_ids()) == oid(3)
