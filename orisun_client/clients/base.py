"""
客户端基类

负责所有客户端共用的部分：
- 解析连接目标并构建共享连接
- 认证中间件与 token 缓存
- 日志配置
- 连接关闭（幂等，带有限时长的优雅排空）
"""
from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence, Union

import structlog

from orisun_client.core.config import ClientSettings, ConnectionConfig
from orisun_client.core.logging_config import configure_logging, get_logger
from orisun_client.interceptors import AuthMiddleware, LoggingMiddleware, TokenCache, basic_credentials
from orisun_client.interceptors.middleware import CallMiddleware
from orisun_client.transport.channel import ManagedChannel, build_channel
from orisun_client.transport.executor import CallExecutor
from orisun_client.transport.target import resolve_target


logger = get_logger(__name__)


class BaseClient:
    """事件存储与用户管理客户端的公共基类"""

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        enable_logging: bool = False,
        log_level: Union[int, str] = logging.INFO,
        middlewares: Sequence[CallMiddleware] = (),
    ):
        """
        初始化客户端

        Args:
            config: 连接配置，缺省时连接 localhost:5005
            username: 基本认证用户名
            password: 基本认证密码
            enable_logging: 是否输出客户端日志（关闭时只输出 WARNING 及以上）
            log_level: 开启日志时的级别
            middlewares: 额外的调用中间件，追加在内置中间件之后
        """
        if not structlog.is_configured():
            configure_logging(log_level if enable_logging else logging.WARNING)

        self.config = config or ConnectionConfig()
        self.token_cache = TokenCache()
        self._auth = AuthMiddleware(self.token_cache, basic_credentials(username, password))
        self._middlewares = [LoggingMiddleware(), *middlewares]

        resolved = resolve_target(self.config)
        self._channel: ManagedChannel = build_channel(self.config, resolved, self._auth, self._middlewares)
        self._executor = CallExecutor(self._channel, self.config.default_timeout_seconds)
        self._close_lock = threading.Lock()
        self._closed = False

        logger.info(
            "client_initialized",
            client=type(self).__name__,
            target=resolved.target if resolved else None,
            timeout_seconds=self.config.default_timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None, **kwargs):
        """根据 ClientSettings（环境变量 ORISUN_*）创建客户端"""
        settings = settings or ClientSettings()
        kwargs.setdefault("username", settings.username)
        kwargs.setdefault("password", settings.password)
        kwargs.setdefault("enable_logging", settings.log_enabled)
        kwargs.setdefault("log_level", settings.log_level)
        if settings.log_enabled and not structlog.is_configured():
            configure_logging(settings.log_level, json_logs=settings.log_json)
        return cls(settings.to_connection_config(), **kwargs)

    @property
    def channel(self) -> ManagedChannel:
        return self._channel

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """关闭连接，可重复调用"""
        with self._close_lock:
            if self._closed:
                logger.debug("client_already_closed", client=type(self).__name__)
                return
            self._closed = True
        logger.debug("client_closing", client=type(self).__name__)
        self._channel.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
