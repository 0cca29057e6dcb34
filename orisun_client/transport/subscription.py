"""长连接订阅

服务端推送的事件在一个后台线程中按顺序消费，并以消息形式交给调用方的 handler：

- ``EventReceived``: 收到一条事件
- ``SubscriptionFailed``: 订阅以错误结束
- ``SubscriptionCompleted``: 服务端正常结束订阅

终止消息最多出现一次，且一定是最后一条。``close()`` 可重复调用，
也可以在 handler 内部调用；关闭之后不会再有任何 handler 调用。
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

import grpc

from orisun_client.core.exceptions import OrisunError
from orisun_client.core.logging_config import get_logger
from orisun_client.mappers.errors import translate_rpc_error
from orisun_client.protos import RpcMethod


logger = get_logger(__name__)


class SubscriptionState(str, Enum):
    OPEN = "open"
    RECEIVING = "receiving"
    CLOSED = "closed"


@dataclass(frozen=True)
class EventReceived:
    event: Any


@dataclass(frozen=True)
class SubscriptionFailed:
    error: OrisunError


@dataclass(frozen=True)
class SubscriptionCompleted:
    pass


SubscriptionMessage = Union[EventReceived, SubscriptionFailed, SubscriptionCompleted]
MessageHandler = Callable[[SubscriptionMessage], None]


def callbacks(
    on_event: Callable[[Any], None],
    on_error: Optional[Callable[[OrisunError], None]] = None,
    on_completed: Optional[Callable[[], None]] = None,
) -> MessageHandler:
    """Adapt separate event/error/completion callbacks into one message handler."""

    def _handler(message: SubscriptionMessage) -> None:
        if isinstance(message, EventReceived):
            on_event(message.event)
        elif isinstance(message, SubscriptionFailed):
            if on_error is not None:
                on_error(message.error)
        elif on_completed is not None:
            on_completed()

    return _handler


class Subscription:
    def __init__(
        self,
        executor,
        method: RpcMethod,
        request: Any,
        handler: MessageHandler,
        operation: str,
        name: Optional[str] = None,
        timeout: Optional[float] = None,
        message: Optional[str] = None,
        **context: Any,
    ) -> None:
        self._handler = handler
        self._operation = operation
        self._message = message
        self._context = context
        self._name = name or method.name
        # Reentrant so that close() may be called from inside the handler
        self._lock = threading.RLock()
        self._state = SubscriptionState.OPEN
        self._finished = threading.Event()

        self._call = executor.stream(method, request, operation, timeout=timeout)
        self._thread = threading.Thread(
            target=self._run,
            name=f"orisun-subscription-{self._name}",
            daemon=True,
        )
        self._thread.start()
        logger.info("subscription_opened", subscription=self._name, method=method.path)

    @property
    def state(self) -> SubscriptionState:
        with self._lock:
            return self._state

    @property
    def is_closed(self) -> bool:
        return self.state is SubscriptionState.CLOSED

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker thread has stopped consuming the stream."""
        return self._finished.wait(timeout)

    def close(self) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            self._state = SubscriptionState.CLOSED
        self._call.cancel()
        logger.info("subscription_closed", subscription=self._name)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(self) -> None:
        try:
            for item in self._call:
                if not self._dispatch(item):
                    return
            self._terminate(SubscriptionCompleted())
        except grpc.RpcError as exc:
            if self.is_closed:
                # cancelled by close()
                return
            error = translate_rpc_error(exc, self._operation, self._message, **self._context)
            logger.warning(
                "subscription_failed",
                subscription=self._name,
                status=error.get_context("statusCode"),
            )
            self._terminate(SubscriptionFailed(error))
        finally:
            self._finished.set()

    def _dispatch(self, item: Any) -> bool:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return False
            self._state = SubscriptionState.RECEIVING
            try:
                self._handler(EventReceived(item))
            except Exception as exc:
                logger.error("subscription_handler_failed", subscription=self._name, error=str(exc), exc_info=True)
                error = OrisunError(
                    "Subscription handler failed",
                    cause=exc,
                    context={"operation": self._operation, **self._context},
                )
                self._terminate(SubscriptionFailed(error))
                return False
            return self._state is not SubscriptionState.CLOSED

    def _terminate(self, message: SubscriptionMessage) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            self._state = SubscriptionState.CLOSED
            self._call.cancel()
            try:
                self._handler(message)
            except Exception as exc:
                logger.error("subscription_handler_failed", subscription=self._name, error=str(exc), exc_info=True)
        if isinstance(message, SubscriptionCompleted):
            logger.info("subscription_completed", subscription=self._name)
