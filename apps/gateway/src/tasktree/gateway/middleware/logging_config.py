"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE 环境变量控制，false 时只输出本地日志。
"""

import logging
import os

import structlog

SERVICE_NAME = "tasktree"


def _add_service_name(
    _logger: object, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """为每条日志附加服务名"""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging() -> None:
    """初始化 structlog 配置

    TASKTREE_LOG_FORMAT: "json" 输出结构化 JSON，其余值（默认 "dev"）输出可读格式
    TASKTREE_LOG_LEVEL: 标准库日志级别，默认 INFO
    TASKTREE_SQL_LOG_LEVEL: aiosqlite 日志级别，默认 WARNING（DEBUG 时逐条输出 SQL 调用）
    """
    log_format = os.environ.get("TASKTREE_LOG_FORMAT", "dev")
    log_level = os.environ.get("TASKTREE_LOG_LEVEL", "INFO")
    sql_log_level = os.environ.get("TASKTREE_SQL_LOG_LEVEL", "WARNING")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_service_name,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 标准库 logging（uvicorn / aiosqlite 日志统一走同一渲染器）
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # aiosqlite 在 DEBUG 级别为每次 execute 打日志，默认压低
    logging.getLogger("aiosqlite").setLevel(
        getattr(logging, sql_log_level.upper(), logging.WARNING)
    )


def setup_logfire() -> bool:
    """Logfire 可选初始化，返回是否启用

    需要安装 observability extra 并设置 LOGFIRE_SEND_TO_LOGFIRE=true。
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return False
    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi()
    except Exception as e:
        # 初始化失败不影响服务启动
        structlog.get_logger().warning(
            "logfire_init_failed",
            error_type=type(e).__name__,
            message="Logfire 初始化失败，仅输出本地日志",
        )
        return False
    return True
