"""短前缀 ID 解析

对调用方提供的候选集合做纯查询，不访问存储。
plan ID、任务 ID、评论 ID 与提交哈希统一使用同一规则：
前缀只转为小写，不做其他规范化，至少 get_min_id_prefix_length() 个十六进制字符。
"""

import re
from collections.abc import Iterable

from .config import SHORT_ID_LENGTH, get_min_id_prefix_length
from .exceptions import AmbiguousIdError, IdNotFoundError, InvalidIdPrefixError

_HEX_RE = re.compile(r"^[0-9a-f]+$")


def normalize_prefix(prefix: str) -> str:
    """校验并规范化前缀

    Raises:
        InvalidIdPrefixError: 前缀过短或包含非十六进制字符
    """
    normalized = prefix.lower()
    min_length = get_min_id_prefix_length()
    if len(normalized) < min_length:
        raise InvalidIdPrefixError(
            f"ID 前缀至少需要 {min_length} 个字符: '{prefix}'",
            prefix,
        )
    if not _HEX_RE.match(normalized):
        raise InvalidIdPrefixError(f"ID 前缀必须是十六进制: '{prefix}'", prefix)
    return normalized


def find_matches(prefix: str, candidates: Iterable[str]) -> list[str]:
    """返回所有以 prefix 开头的候选 ID（去重、排序），不抛出未找到/歧义异常"""
    normalized = normalize_prefix(prefix)
    return sorted({c.lower() for c in candidates if c.lower().startswith(normalized)})


def resolve_id(prefix: str, candidates: Iterable[str]) -> str:
    """把短前缀解析为唯一的完整 ID

    Args:
        prefix: 用户输入的前缀（大小写不敏感）
        candidates: 完整 ID 候选集合

    Returns:
        唯一匹配的完整 ID

    Raises:
        InvalidIdPrefixError: 前缀不合法
        IdNotFoundError: 没有匹配
        AmbiguousIdError: 两个及以上匹配，matches 属性包含全部匹配
    """
    matches = find_matches(prefix, candidates)
    if not matches:
        raise IdNotFoundError(f"找不到以 '{prefix}' 开头的 ID", prefix)
    if len(matches) > 1:
        raise AmbiguousIdError(prefix, matches)
    return matches[0]


def short_id(full_id: str) -> str:
    """展示用的短 ID"""
    return full_id[:SHORT_ID_LENGTH]
