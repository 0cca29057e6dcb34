"""
Structlog 日志配置模块

客户端作为库被引入，导入时不做任何配置；由客户端在构建时调用一次
configure_logging，且只接管 ``orisun_client`` 这一棵 logger 树。
"""
import json
import logging
from typing import Any, List, Union

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter


LOGGER_NAME = "orisun_client"


def get_renderer(json_logs: bool = False) -> Any:
    """Console renderer by default, JSON when requested.

    structlog passes default/sort_keys through to the serializer.
    """
    if not json_logs:
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)

    return JSONRenderer(serializer=_dumps)


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[int, str] = logging.INFO, json_logs: bool = False) -> None:
    """配置 structlog，并把 orisun_client 的标准库日志接到同一处理链。"""
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared_pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=shared_pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer(json_logs)],
        )
    )

    # The host application's root logger is left alone
    client_logger = logging.getLogger(LOGGER_NAME)
    client_logger.handlers.clear()
    client_logger.addHandler(handler)
    client_logger.propagate = False
    client_logger.setLevel(_coerce_level(level))


def get_logger(name: str = LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)
