from __future__ import annotations

import threading
from typing import Any, Optional, Sequence

import grpc

from orisun_client.core.config import ConnectionConfig, TlsSettings
from orisun_client.core.exceptions import ConfigurationError
from orisun_client.core.logging_config import get_logger
from orisun_client.interceptors.middleware import CallMiddleware, MiddlewareInterceptor
from orisun_client.transport.target import SOURCE_SERVERS, ResolvedTarget


logger = get_logger(__name__)


class CallTracker:
    """Counts in-flight calls so that close() can drain them."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._active = 0

    @property
    def active(self) -> int:
        with self._cond:
            return self._active

    def started(self) -> None:
        with self._cond:
            self._active += 1

    def finished(self) -> None:
        with self._cond:
            self._active = max(0, self._active - 1)
            if self._active == 0:
                self._cond.notify_all()

    def wait_idle(self, timeout: Optional[float]) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._active == 0, timeout=timeout)


class ManagedChannel:
    """The one shared connection of a client.

    ``channel`` is what calls go through (intercepted when middleware is
    installed); ``raw`` is the underlying grpc channel that gets closed.
    """

    def __init__(
        self,
        raw: grpc.Channel,
        channel: grpc.Channel,
        grace_seconds: float,
        target: Optional[ResolvedTarget] = None,
    ) -> None:
        self.raw = raw
        self.channel = channel
        self.target = target
        self.tracker = CallTracker()
        self._grace_seconds = grace_seconds
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                logger.debug("grpc_channel_already_closed")
                return
            self._closed = True

        if not self.tracker.wait_idle(self._grace_seconds):
            logger.warning(
                "grpc_channel_drain_timeout",
                in_flight=self.tracker.active,
                grace_seconds=self._grace_seconds,
            )
        try:
            self.raw.close()
        except Exception as exc:
            # close is best-effort cleanup
            logger.error("grpc_channel_close_failed", error=str(exc), exc_info=True)
            return
        logger.info("grpc_channel_closed")


def channel_options(config: ConnectionConfig, resolved: ResolvedTarget) -> list[tuple[str, Any]]:
    options: list[tuple[str, Any]] = [
        ("grpc.keepalive_time_ms", config.keep_alive_time_ms),
        ("grpc.keepalive_timeout_ms", config.keep_alive_timeout_ms),
        ("grpc.keepalive_permit_without_calls", 1 if config.keep_alive_permit_without_calls else 0),
    ]
    if resolved.multi_peer:
        options.append(("grpc.lb_policy_name", config.load_balancing_policy))
    return options


def _read(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, "rb") as f:
        return f.read()


def channel_credentials(tls: TlsSettings) -> grpc.ChannelCredentials:
    if bool(tls.cert) != bool(tls.key):
        raise ConfigurationError("TLS client cert and key must be provided together")
    return grpc.ssl_channel_credentials(
        root_certificates=_read(tls.ca),
        private_key=_read(tls.key),
        certificate_chain=_read(tls.cert),
    )


def build_channel(
    config: ConnectionConfig,
    resolved: Optional[ResolvedTarget],
    auth: Optional[CallMiddleware] = None,
    middlewares: Sequence[CallMiddleware] = (),
) -> ManagedChannel:
    """Build the shared connection for a resolved target.

    A prebuilt channel (resolved is None) is used as-is. The auth middleware
    is installed only for server-list targets, not for dns/static targets.
    """
    if resolved is None:
        if config.channel is None:
            raise ConfigurationError("No target resolved and no prebuilt channel supplied")
        logger.info("grpc_channel_prebuilt")
        return ManagedChannel(config.channel, config.channel, config.shutdown_grace_seconds)

    options = channel_options(config, resolved)
    if config.use_tls:
        raw = grpc.secure_channel(resolved.target, channel_credentials(config.tls), options=options)
    else:
        raw = grpc.insecure_channel(resolved.target, options=options)

    chain: list[CallMiddleware] = []
    if auth is not None and resolved.source == SOURCE_SERVERS:
        chain.append(auth)
    chain.extend(middlewares)

    channel = grpc.intercept_channel(raw, MiddlewareInterceptor(chain)) if chain else raw

    logger.info(
        "grpc_channel_built",
        target=resolved.target,
        source=resolved.source,
        tls=config.use_tls,
        lb_policy=config.load_balancing_policy if resolved.multi_peer else None,
        middlewares=[type(m).__name__ for m in chain],
    )
    return ManagedChannel(raw, channel, config.shutdown_grace_seconds, resolved)
