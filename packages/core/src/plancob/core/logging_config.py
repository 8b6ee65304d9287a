"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出

归约器只通过 structlog 记录事件，是否输出、输出到哪里由调用方调用
setup_logging() 决定。作为库，这里只配置 "plancob" logger，
不触碰根 logger 上宿主应用自己的 handler。
"""

import logging
from typing import TextIO

import structlog

from .config import get_log_format, get_log_level

LOGGER_NAME = "plancob"


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(
    level: str | None = None,
    log_format: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """初始化 structlog 配置

    Args:
        level: 日志级别，缺省读取 PLANCOB_LOG_LEVEL
        log_format: "json" 或 "dev"，缺省读取 PLANCOB_LOG_FORMAT
        stream: 输出流，缺省为 stderr

    Returns:
        配置好的 "plancob" 标准库 logger；重复调用会替换之前安装的 handler
    """
    log_format = log_format or get_log_format()
    log_level = (level or get_log_level()).upper()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(log_format),
            foreign_pre_chain=shared_processors,
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        if isinstance(old.formatter, structlog.stdlib.ProcessorFormatter):
            logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, log_level, logging.INFO))
    logger.propagate = False
    return logger
