"""配置常量模块 -- 可通过环境变量覆盖

包含 COB 类型名、短 ID 前缀最小长度、日志格式与级别等可配置项。
归约逻辑本身不读取任何配置，保证同一 action 序列在任何进程得到相同结果。
"""

import os

import structlog

log = structlog.get_logger()

# Plan COB 类型名（反向域名格式）
TYPE_NAME: str = "me.hdh.plan"

# 短 ID 展示长度
SHORT_ID_LENGTH: int = 7

_DEFAULT_MIN_ID_PREFIX = 7


def get_min_id_prefix_length() -> int:
    """获取短前缀 ID 解析所需的最小字符数

    环境变量 PLANCOB_MIN_ID_PREFIX 可覆盖默认值 7；
    非法值（非整数或小于 1）记录警告并回退到默认值。
    """
    raw = os.environ.get("PLANCOB_MIN_ID_PREFIX")
    if raw is None:
        return _DEFAULT_MIN_ID_PREFIX
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        log.warning(
            "invalid_min_id_prefix_config",
            env_var="PLANCOB_MIN_ID_PREFIX",
            value=raw,
            fallback=_DEFAULT_MIN_ID_PREFIX,
        )
        return _DEFAULT_MIN_ID_PREFIX
    return value


def get_log_format() -> str:
    """获取日志渲染模式：dev（默认）或 json"""
    return os.environ.get("PLANCOB_LOG_FORMAT", "dev")


def get_log_level() -> str:
    """获取日志级别（默认 INFO）"""
    return os.environ.get("PLANCOB_LOG_LEVEL", "INFO")
