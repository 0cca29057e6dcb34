"""客户端异常定义

所有异常都继承自 OrisunError，并携带结构化上下文（operation、状态码、相关标识），
渲染后的消息中包含全部上下文，便于在日志中直接定位问题。
"""
from __future__ import annotations

from typing import Any, Optional

import grpc


class OrisunError(Exception):
    """客户端异常基类"""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.cause = cause
        self._context: dict[str, Any] = dict(context or {})
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def add_context(self, key: str, value: Any) -> "OrisunError":
        self._context[key] = value
        return self

    def get_context(self, key: str) -> Any:
        return self._context.get(key)

    def has_context(self, key: str) -> bool:
        return key in self._context

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def __str__(self) -> str:
        if not self._context:
            return self.message
        rendered = ", ".join(f"{key}={value}" for key, value in self._context.items())
        return f"{self.message} [Context: {rendered}]"


class ConfigurationError(OrisunError):
    """连接配置自相矛盾或取值非法"""


class ValidationError(OrisunError):
    """请求在本地校验失败，不会发起任何网络调用"""


class TransportError(OrisunError):
    """远程调用失败"""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
        status_code: Optional[grpc.StatusCode] = None,
        status_description: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.status_description = status_description
        super().__init__(message, cause=cause, context=context)


class AuthError(TransportError):
    """凭据或 token 被服务端拒绝"""


class OptimisticConcurrencyError(TransportError):
    """追加事件时期望位置已过期"""

    def __init__(
        self,
        message: str,
        expected_version: int,
        actual_version: int,
        cause: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
        status_code: Optional[grpc.StatusCode] = None,
        status_description: Optional[str] = None,
    ) -> None:
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            message,
            cause=cause,
            context=context,
            status_code=status_code,
            status_description=status_description,
        )


class VersionExtractionError(TransportError):
    """检测到版本冲突，但无法从描述中解析出版本号"""


__all__ = [
    "OrisunError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "AuthError",
    "OptimisticConcurrencyError",
    "VersionExtractionError",
]
