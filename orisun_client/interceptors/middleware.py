from __future__ import annotations

import collections
import time
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

import grpc

from orisun_client.core.logging_config import get_logger


logger = get_logger(__name__)


Metadata = List[Tuple[str, str]]


class CallMiddleware(Protocol):
    """Hooks applied to every call made through an intercepted channel.

    ``before_call`` runs before the call is sent and returns the outgoing
    metadata. ``on_headers`` runs when the response headers arrive, before the
    caller sees the response. ``after_call`` runs once the call has finished.
    """

    def before_call(self, method: str, metadata: Metadata) -> Metadata: ...

    def on_headers(self, method: str, headers: Optional[Sequence[Tuple[str, Any]]]) -> None: ...

    def after_call(self, method: str, code: Optional[grpc.StatusCode], elapsed_ms: float) -> None: ...


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


def _initial_metadata(call: Any) -> Optional[Sequence[Tuple[str, Any]]]:
    try:
        headers = call.initial_metadata()
    except Exception:
        headers = None
    if headers:
        return headers
    # A failed blocking call surfaces as the RpcError itself
    try:
        exc = call.exception()
    except Exception:
        return headers
    if isinstance(exc, grpc.Call):
        try:
            return exc.initial_metadata()
        except Exception:
            return None
    return headers


def _status_code(call: Any) -> Optional[grpc.StatusCode]:
    try:
        return call.code()
    except Exception:
        return None


class _ObservedStream:
    """Server stream wrapper that reports response headers before the first item."""

    def __init__(self, call: Any, on_headers) -> None:
        self._call = call
        self._on_headers = on_headers
        self._headers_seen = False

    def __iter__(self):
        return self

    def __next__(self):
        try:
            item = next(self._call)
        except BaseException:
            self._see_headers()
            raise
        self._see_headers()
        return item

    def _see_headers(self) -> None:
        if self._headers_seen:
            return
        self._headers_seen = True
        self._on_headers(_initial_metadata(self._call))

    def __getattr__(self, name: str) -> Any:
        return getattr(self._call, name)


class MiddlewareInterceptor(grpc.UnaryUnaryClientInterceptor, grpc.UnaryStreamClientInterceptor):
    """Applies an ordered list of CallMiddleware to unary and server-streaming calls."""

    def __init__(self, middlewares: Iterable[CallMiddleware]) -> None:
        self._middlewares = list(middlewares)

    @property
    def middlewares(self) -> list[CallMiddleware]:
        return list(self._middlewares)

    def _prepare(self, details: grpc.ClientCallDetails) -> _ClientCallDetails:
        metadata: Metadata = list(details.metadata or [])
        for middleware in self._middlewares:
            metadata = list(middleware.before_call(details.method, metadata))
        return _ClientCallDetails(
            details.method,
            details.timeout,
            metadata,
            details.credentials,
            getattr(details, "wait_for_ready", None),
            getattr(details, "compression", None),
        )

    def _headers_received(self, method: str, headers) -> None:
        for middleware in self._middlewares:
            try:
                middleware.on_headers(method, headers)
            except Exception as exc:
                logger.error("grpc_middleware_error", hook="on_headers", method=method, error=str(exc), exc_info=True)

    def _finished(self, method: str, call: Any, start: float) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        code = _status_code(call)
        for middleware in self._middlewares:
            try:
                middleware.after_call(method, code, elapsed_ms)
            except Exception as exc:
                logger.error("grpc_middleware_error", hook="after_call", method=method, error=str(exc), exc_info=True)

    def intercept_unary_unary(self, continuation, client_call_details, request):
        details = self._prepare(client_call_details)
        method = details.method
        start = time.perf_counter()
        call = continuation(details, request)

        def _done(c) -> None:
            self._headers_received(method, _initial_metadata(c))
            self._finished(method, c, start)

        # Registered before the caller can attach its own callbacks
        call.add_done_callback(_done)
        return call

    def intercept_unary_stream(self, continuation, client_call_details, request):
        details = self._prepare(client_call_details)
        method = details.method
        start = time.perf_counter()
        call = continuation(details, request)
        call.add_done_callback(lambda c: self._finished(method, c, start))
        return _ObservedStream(call, lambda headers: self._headers_received(method, headers))
