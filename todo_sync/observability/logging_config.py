"""
结构化日志配置：structlog 接管标准库 logging

structlog 日志与第三方库（SQLAlchemy、uvicorn、aiosqlite）的标准库日志
经同一个 ProcessorFormatter 输出，格式一致且都带上请求绑定的 trace_id / todo_context。
- 开发环境：彩色文本
- 生产环境：JSON（便于 Loki/ELK 解析）
"""

import logging
import sys

import structlog

from todo_sync.config import Settings

# 第三方库的噪音日志，单独压到 WARNING
_QUIET_LOGGERS = ("aiosqlite", "asyncio")


def setup_logging(settings: Settings) -> None:
    """按配置初始化日志；可重复调用（每次替换 root handler）"""
    log_level = logging.getLevelNamesMapping().get(settings.LOG_LEVEL.upper(), logging.INFO)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.ENV == "production":
        renderers: list = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
