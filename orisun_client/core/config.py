"""
配置文件 - 客户端连接配置管理
"""
import json
from typing import Annotated, Optional

import grpc
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from orisun_client.core.exceptions import ConfigurationError


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5005


class ServerAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class TlsSettings(BaseModel):
    """PEM 文件路径；是否启用 TLS 由 use_tls 决定"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ca: Optional[str] = None
    cert: Optional[str] = None
    key: Optional[str] = None


class ConnectionConfig(BaseModel):
    """一次连接的完整配置（构建连接后不可变）"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    servers: list[ServerAddress] = Field(default_factory=list)
    dns_target: Optional[str] = None
    static_target: Optional[str] = None
    use_dns_resolver: bool = True
    load_balancing_policy: str = "round_robin"
    use_tls: bool = False
    tls: TlsSettings = Field(default_factory=TlsSettings)

    # Keep-alive
    keep_alive_time_ms: int = 30_000
    keep_alive_timeout_ms: int = 10_000
    keep_alive_permit_without_calls: bool = True

    default_timeout_seconds: int = 30
    # Bounded drain period on close
    shutdown_grace_seconds: float = 5.0

    # 预先构建好的连接，直接使用，不做任何额外配置
    channel: Optional[grpc.Channel] = None

    @model_validator(mode="after")
    def _reject_contradictions(self):
        has_dns = bool(self.dns_target and self.dns_target.strip())
        has_static = bool(self.static_target and self.static_target.strip())

        if has_dns and has_static:
            raise ConfigurationError(
                "dns_target and static_target are mutually exclusive",
                context={"dns_target": self.dns_target, "static_target": self.static_target},
            )
        if (has_dns or has_static) and self.servers:
            raise ConfigurationError(
                "An explicit target cannot be combined with a server list",
                context={"target": self.dns_target or self.static_target, "servers": len(self.servers)},
            )
        if self.channel is not None and (has_dns or has_static or self.servers):
            raise ConfigurationError("A prebuilt channel cannot be combined with targets or servers")

        for server in self.servers:
            if not server.host or not server.host.strip():
                raise ConfigurationError("Server host is required", context={"server": server.address})
            if not 0 < server.port < 65536:
                raise ConfigurationError("Server port out of range", context={"server": server.address})

        if self.default_timeout_seconds <= 0:
            raise ConfigurationError(
                "default_timeout_seconds must be positive",
                context={"default_timeout_seconds": self.default_timeout_seconds},
            )
        if self.keep_alive_time_ms <= 0 or self.keep_alive_timeout_ms <= 0:
            raise ConfigurationError(
                "Keep-alive intervals must be positive",
                context={
                    "keep_alive_time_ms": self.keep_alive_time_ms,
                    "keep_alive_timeout_ms": self.keep_alive_timeout_ms,
                },
            )
        if self.shutdown_grace_seconds < 0:
            raise ConfigurationError(
                "shutdown_grace_seconds must not be negative",
                context={"shutdown_grace_seconds": self.shutdown_grace_seconds},
            )
        return self


def parse_server_address(value: str) -> ServerAddress:
    host, sep, port = value.strip().rpartition(":")
    if not sep or not host:
        return ServerAddress(host=value.strip(), port=DEFAULT_PORT)
    return ServerAddress(host=host, port=int(port))


class ClientSettings(BaseSettings):
    """客户端配置（支持环境变量 ORISUN_* 与 .env）"""

    servers: Annotated[list[ServerAddress], NoDecode] = Field(default_factory=list)
    dns_target: Optional[str] = None
    static_target: Optional[str] = None
    use_dns_resolver: bool = True
    load_balancing_policy: str = "round_robin"
    use_tls: bool = False
    tls: TlsSettings = Field(default_factory=TlsSettings)

    keep_alive_time_ms: int = 30_000
    keep_alive_timeout_ms: int = 10_000
    keep_alive_permit_without_calls: bool = True

    timeout_seconds: int = 30
    shutdown_grace_seconds: float = 5.0

    # 基本认证
    username: Optional[str] = None
    password: Optional[str] = None

    # 日志
    log_enabled: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="ORISUN_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @field_validator("servers", mode="before")
    @classmethod
    def _parse_servers(cls, v):
        """允许 JSON 字符串或逗号分隔的 host:port 列表两种格式。"""
        if isinstance(v, list):
            return [parse_server_address(item) if isinstance(item, str) else item for item in v]
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("[") and s.endswith("]"):
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return [parse_server_address(item) if isinstance(item, str) else item for item in arr]
                except json.JSONDecodeError:
                    pass
            return [parse_server_address(item) for item in s.split(",") if item.strip()]
        return v

    def to_connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            servers=self.servers,
            dns_target=self.dns_target,
            static_target=self.static_target,
            use_dns_resolver=self.use_dns_resolver,
            load_balancing_policy=self.load_balancing_policy,
            use_tls=self.use_tls,
            tls=self.tls,
            keep_alive_time_ms=self.keep_alive_time_ms,
            keep_alive_timeout_ms=self.keep_alive_timeout_ms,
            keep_alive_permit_without_calls=self.keep_alive_permit_without_calls,
            default_timeout_seconds=self.timeout_seconds,
            shutdown_grace_seconds=self.shutdown_grace_seconds,
        )
