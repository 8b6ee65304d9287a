"""全局 pytest 配置 -- 身份、时间戳与 Op 构造 fixture"""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest
import structlog
from plancob.core.authorization import DelegateAuthorizer
from plancob.core.models import Action, Op

AUTHOR = "did:key:z6MkAuthor"
DELEGATE = "did:key:z6MkDelegate"
STRANGER = "did:key:z6MkStranger"

BASE_TS = datetime(2026, 1, 1, tzinfo=UTC)


def _oid(n: int) -> str:
    return f"{n:040x}"


@pytest.fixture
def oid() -> Callable[[int], str]:
    """按序号生成 40 位十六进制 ID"""
    return _oid


@pytest.fixture
def make_op() -> Callable[..., Op]:
    """构造 Op：make_op(n, action, author=AUTHOR)，时间戳随序号递增"""

    def _make(n: int, action: Action, author: str = AUTHOR) -> Op:
        return Op(
            id=_oid(n),
            author=author,
            timestamp=BASE_TS + timedelta(seconds=n),
            action=action,
        )

    return _make


@pytest.fixture
def author() -> str:
    """plan 作者"""
    return AUTHOR


@pytest.fixture
def delegate() -> str:
    return DELEGATE


@pytest.fixture
def stranger() -> str:
    """既不是作者也不是 delegate"""
    return STRANGER


@pytest.fixture
def ts() -> datetime:
    return BASE_TS


@pytest.fixture
def oracle() -> DelegateAuthorizer:
    """plan 作者以外只有 DELEGATE 一个 delegate"""
    return DelegateAuthorizer([DELEGATE])


@pytest.fixture
def captured_logs() -> Iterator[list[dict]]:
    """捕获 structlog 事件"""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture(autouse=True)
def _clean_plancob_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """测试之间不共享 PLANCOB_* 环境变量"""
    for name in ("PLANCOB_MIN_ID_PREFIX", "PLANCOB_LOG_FORMAT", "PLANCOB_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
