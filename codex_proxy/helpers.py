"""
Utility functions for the application
"""

import sys
import time
import logging
from contextlib import contextmanager
from typing import Optional

import orjson
import structlog
from structlog import contextvars as struct_context


class JSONEncoder:
    """orjson 兼容层（dumps 返回 str）"""

    @staticmethod
    def dumps(obj) -> str:
        # orjson.dumps返回bytes，需要decode
        return orjson.dumps(obj).decode("utf-8")

    @staticmethod
    def loads(s):
        # orjson.loads可以接受str或bytes
        return orjson.loads(s)


json_lib = JSONEncoder()


# 配置structlog
def configure_structlog(log_level: str = "info") -> None:
    """配置structlog日志系统"""
    processors = [
        struct_context.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # 根据日志级别选择渲染器
    if log_level == "debug":
        processors.append(structlog.dev.ConsoleRenderer())
        level = logging.DEBUG
    elif log_level == "info":
        processors.append(structlog.dev.ConsoleRenderer())
        level = logging.INFO
    else:  # false
        processors.append(structlog.processors.JSONRenderer())
        level = logging.CRITICAL  # 只输出致命错误

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None, **initial_values):
    """
    获取一个structlog logger实例

    Args:
        name: logger名称（可选）
        **initial_values: 绑定到 logger 的初始上下文

    Returns:
        structlog BoundLogger实例
    """
    if name:
        return structlog.get_logger(name, **initial_values)
    return structlog.get_logger(**initial_values)


def request_stage_log(logger, stage: str, message: str, **kwargs) -> None:
    """
    Log info-level request stage transitions without dumping payload data.

    Args:
        logger: The request-scoped logger.
        stage: Logical stage identifier (e.g. "received", "upstream_request").
        message: Human readable description for terminal viewers.
        **kwargs: Extra structured fields to enrich the log.
    """
    normalized_stage = (stage or "unknown").strip().lower().replace(" ", "_")
    logger.info(f"[REQUEST] {message}", stage=normalized_stage, **kwargs)


def mask_secret(value: str, keep: int = 20) -> str:
    """Keep the first `keep` characters of a credential for logging."""
    return f"{value[:keep]}***"


def preview_text(value: str, limit: int = 50) -> str:
    return value[:limit]


@contextmanager
def perf_timer(logger, operation_name: str, threshold_ms: float = 0):
    """
    性能计时上下文管理器

    Args:
        logger: 记录结果的 logger
        operation_name: 操作名称
        threshold_ms: 仅记录超过此阈值的操作（毫秒），0表示记录所有

    Yields:
        包含elapsed_ms的字典，可在上下文中使用

    Example:
        with perf_timer(logger, "backend_call") as timer:
            response = await client.post(...)
    """
    timer_dict = {"elapsed_ms": 0, "elapsed_s": 0}
    start_time = time.perf_counter()

    try:
        yield timer_dict
    finally:
        elapsed_s = time.perf_counter() - start_time
        elapsed_ms = elapsed_s * 1000
        timer_dict["elapsed_ms"] = elapsed_ms
        timer_dict["elapsed_s"] = elapsed_s

        if elapsed_ms >= threshold_ms:
            logger.debug(
                f"⏱️ {operation_name}",
                elapsed_ms=f"{elapsed_ms:.2f}ms",
                elapsed_s=f"{elapsed_s:.4f}s",
            )
