"""packages/core 测试配置 -- 已打开的 plan fixture"""

from collections.abc import Callable

import pytest
from plancob.core.authorization import DelegateAuthorizer
from plancob.core.models import AddTask, Op, Open, Plan
from plancob.core.reducer import reduce


@pytest.fixture
def open_op(make_op: Callable[..., Op]) -> Op:
    """作者创建 plan 的 open operation（ID 为 oid(1)）"""
    return make_op(1, Open(title="Migrate storage", description="Move plans to sqlite"))


@pytest.fixture
def plan(open_op: Op, oracle: DelegateAuthorizer) -> Plan:
    """刚打开、没有任务的 plan"""
    result = reduce(None, [open_op], oracle)
    assert result.plan is not None
    return result.plan


@pytest.fixture
def plan_with_tasks(
    open_op: Op,
    make_op: Callable[..., Op],
    oracle: DelegateAuthorizer,
) -> Plan:
    """包含三个任务的 plan：T1=oid(2)、T2=oid(3)、T3=oid(4)"""
    ops = [
        open_op,
        make_op(2, AddTask(subject="T1", estimate="2h")),
        make_op(3, AddTask(subject="T2")),
        make_op(4, AddTask(subject="T3", description="third")),
    ]
    result = reduce(None, ops, oracle)
    assert result.plan is not None
    return result.plan
