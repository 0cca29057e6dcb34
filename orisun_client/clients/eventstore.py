"""事件存储客户端"""
from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Optional

from orisun_client.core.logging_config import get_logger
from orisun_client.protos import eventstore as pb
from orisun_client.transport.subscription import MessageHandler, Subscription, callbacks
from orisun_client.validation import (
    validate_get_events_request,
    validate_save_events_request,
    validate_subscribe_request,
)
from orisun_client.validation.eventstore import GET_EVENTS, SAVE_EVENTS, SUBSCRIBE_TO_EVENTS

from .base import BaseClient


logger = get_logger(__name__)

PING = "ping"


class OrisunClient(BaseClient):
    """Append-only event log client.

    Usage::

        with OrisunClient(ConnectionConfig(servers=[ServerAddress(host="localhost", port=5005)]),
                          username="admin", password="changeit") as client:
            client.save_events(request)
    """

    def save_events(self, request: pb.SaveEventsRequest, timeout: Optional[float] = None) -> pb.WriteResult:
        validate_save_events_request(request)
        logger.debug("save_events", boundary=request.boundary, events=len(request.events))
        result = self._executor.unary(
            pb.SAVE_EVENTS,
            request,
            SAVE_EVENTS,
            timeout=timeout,
            message="Failed to save events",
        )
        logger.info("events_saved", boundary=request.boundary, events=len(request.events))
        return result

    def save_events_async(self, request: pb.SaveEventsRequest, timeout: Optional[float] = None) -> Future:
        """Non-blocking save. The future resolves to a WriteResult or fails with a translated error.

        Wrap with ``asyncio.wrap_future`` to await it from a coroutine.
        """
        validate_save_events_request(request)
        logger.debug("save_events_async", boundary=request.boundary, events=len(request.events))
        return self._executor.unary_future(
            pb.SAVE_EVENTS,
            request,
            SAVE_EVENTS,
            timeout=timeout,
            message="Failed to save events",
        )

    def get_events(self, request: pb.GetEventsRequest, timeout: Optional[float] = None) -> pb.GetEventsResponse:
        validate_get_events_request(request)
        logger.debug("get_events", boundary=request.boundary)
        response = self._executor.unary(
            pb.GET_EVENTS,
            request,
            GET_EVENTS,
            timeout=timeout,
            message="Failed to get events",
            boundary=request.boundary,
        )
        logger.debug("events_retrieved", boundary=request.boundary, events=len(response.events))
        return response

    def subscribe_to_events(
        self,
        request: pb.CatchUpSubscribeToEventStoreRequest,
        handler: Optional[MessageHandler] = None,
        *,
        on_event: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = None,
    ) -> Subscription:
        """Open a catch-up subscription.

        Pass either a message handler or the ``on_event``/``on_error``/
        ``on_completed`` callbacks. Delivery happens on a background thread;
        handlers should not block for long.
        """
        validate_subscribe_request(request)
        if handler is None:
            if on_event is None:
                raise TypeError("subscribe_to_events requires a handler or on_event")
            handler = callbacks(on_event, on_error, on_completed)
        elif on_event or on_error or on_completed:
            raise TypeError("Pass either a handler or callbacks, not both")

        logger.debug("subscribe_to_events", boundary=request.boundary, subscriber=request.subscriber_name)
        return Subscription(
            self._executor,
            pb.CATCH_UP_SUBSCRIBE_TO_EVENTS,
            request,
            handler,
            SUBSCRIBE_TO_EVENTS,
            name=request.subscriber_name,
            timeout=timeout,
            message="Subscription failed",
            boundary=request.boundary,
            subscriber=request.subscriber_name,
        )

    def ping(self, timeout: Optional[float] = None) -> None:
        self._executor.unary(pb.PING, pb.PingRequest(), PING, timeout=timeout, message="Ping failed")
        logger.debug("ping_ok")

    def health_check(self, boundary: str) -> bool:
        """Ping, then read one event from the boundary. Errors propagate."""
        self.ping()
        self.get_events(pb.GetEventsRequest(boundary=boundary, count=1))
        logger.debug("health_check_ok", boundary=boundary)
        return True
