from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Optional, Sequence, Tuple

import grpc

from orisun_client.core.exceptions import TransportError
from orisun_client.core.logging_config import get_logger
from orisun_client.mappers.errors import translate_rpc_error
from orisun_client.protos import RpcMethod
from orisun_client.transport.channel import ManagedChannel


logger = get_logger(__name__)

Metadata = Optional[Sequence[Tuple[str, str]]]


class CallExecutor:
    """Issues calls against the shared connection.

    - ``unary``: blocking, bounded by the default deadline unless overridden
    - ``unary_future``: returns a Future resolved exactly once with the
      response or a translated error; cancelling it cancels the RPC
    - ``stream``: raw server stream, no deadline unless one is given
    """

    def __init__(self, managed: ManagedChannel, default_timeout: float) -> None:
        self._managed = managed
        self._default_timeout = default_timeout
        self._lock = threading.Lock()
        self._callables: dict[str, Any] = {}

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    @property
    def tracker(self):
        return self._managed.tracker

    def _callable(self, method: RpcMethod):
        with self._lock:
            fn = self._callables.get(method.path)
            if fn is None:
                channel = self._managed.channel
                factory = channel.unary_stream if method.server_streaming else channel.unary_unary
                fn = factory(
                    method.path,
                    request_serializer=method.serialize_request,
                    response_deserializer=method.deserialize_response,
                )
                self._callables[method.path] = fn
            return fn

    def _ensure_open(self, operation: str) -> None:
        if self._managed.closed:
            raise TransportError("Client is closed", context={"operation": operation})

    def _deadline(self, timeout: Optional[float]) -> float:
        return timeout if timeout is not None else self._default_timeout

    def unary(
        self,
        method: RpcMethod,
        request: Any,
        operation: str,
        timeout: Optional[float] = None,
        message: Optional[str] = None,
        metadata: Metadata = None,
        **context: Any,
    ) -> Any:
        self._ensure_open(operation)
        self.tracker.started()
        try:
            return self._callable(method)(request, timeout=self._deadline(timeout), metadata=metadata)
        except grpc.RpcError as exc:
            raise translate_rpc_error(exc, operation, message, **context) from exc
        finally:
            self.tracker.finished()

    def unary_future(
        self,
        method: RpcMethod,
        request: Any,
        operation: str,
        timeout: Optional[float] = None,
        message: Optional[str] = None,
        metadata: Metadata = None,
        **context: Any,
    ) -> Future:
        self._ensure_open(operation)
        result: Future = Future()
        self.tracker.started()
        try:
            call = self._callable(method).future(request, timeout=self._deadline(timeout), metadata=metadata)
        except Exception:
            self.tracker.finished()
            raise

        def _on_call_done(c) -> None:
            error = None
            value = None
            try:
                if c.cancelled():
                    error = translate_rpc_error(c, operation, message, **context)
                else:
                    exc = c.exception()
                    if exc is None:
                        value = c.result()
                    else:
                        error = translate_rpc_error(exc, operation, message, **context)
            finally:
                # The call is over before the caller's done-callbacks run
                self.tracker.finished()

            # Moves the result to RUNNING unless the caller already cancelled it
            if not result.set_running_or_notify_cancel():
                return
            if error is None:
                result.set_result(value)
            else:
                result.set_exception(error)

        def _on_result_done(f: Future) -> None:
            if f.cancelled():
                logger.debug("grpc_call_cancelled", method=method.path, operation=operation)
                call.cancel()

        result.add_done_callback(_on_result_done)
        call.add_done_callback(_on_call_done)
        return result

    def stream(
        self,
        method: RpcMethod,
        request: Any,
        operation: str,
        timeout: Optional[float] = None,
        metadata: Metadata = None,
    ):
        """Open a server stream. The returned call is iterable and cancellable."""
        self._ensure_open(operation)
        return self._callable(method)(request, timeout=timeout, metadata=metadata)
