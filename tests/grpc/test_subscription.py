import threading
import time
import uuid

import grpc
import pytest

from orisun_client import OrisunClient
from orisun_client.core.exceptions import TransportError, ValidationError
from orisun_client.transport.subscription import (
    EventReceived,
    SubscriptionCompleted,
    SubscriptionFailed,
    SubscriptionState,
)
from orisun_client.protos import eventstore as pb


def _events(n: int):
    return [
        pb.Event(event_id=str(uuid.uuid4()), event_type="OrderPlaced", data=str(i)) for i in range(n)
    ]


def _request(name: str = "projector") -> pb.CatchUpSubscribeToEventStoreRequest:
    return pb.CatchUpSubscribeToEventStoreRequest(boundary="orders", subscriber_name=name)


@pytest.fixture
def client(connection_config):
    c = OrisunClient(connection_config, username="admin", password="changeit")
    try:
        yield c
    finally:
        c.close()


def test_events_delivered_in_order_then_completed(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(5)
    messages = []

    sub = client.subscribe_to_events(_request(), messages.append)
    assert sub.wait(5)

    assert [m.event.data for m in messages[:-1]] == ["0", "1", "2", "3", "4"]
    assert isinstance(messages[-1], SubscriptionCompleted)
    assert sub.state is SubscriptionState.CLOSED


def test_stream_error_is_terminal_and_last(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(2)
    store.stream_error = (grpc.StatusCode.UNAVAILABLE, "gone")
    messages = []

    sub = client.subscribe_to_events(_request(), messages.append)
    assert sub.wait(5)

    assert [type(m) for m in messages] == [EventReceived, EventReceived, SubscriptionFailed]
    error = messages[-1].error
    assert isinstance(error, TransportError)
    assert error.get_context("operation") == "subscribeToEvents"
    assert error.get_context("statusCode") == "UNAVAILABLE"


def test_callbacks_adapter(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(3)
    received, errors, completed = [], [], threading.Event()

    sub = client.subscribe_to_events(
        _request(),
        on_event=received.append,
        on_error=errors.append,
        on_completed=completed.set,
    )
    assert completed.wait(5)
    sub.wait(5)
    assert len(received) == 3
    assert errors == []


def test_token_harvested_before_first_event(client, fake_services):
    _, store, _ = fake_services
    store.issue_token = "stream-token"
    store.stream_events = _events(1)
    seen = []

    def on_event(event):
        seen.append(client.token_cache.cached_token)

    sub = client.subscribe_to_events(_request(), on_event=on_event)
    assert sub.wait(5)
    assert seen == ["stream-token"]


def test_close_twice_is_noop(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(1)
    store.hold_stream = True
    first = threading.Event()
    messages = []

    def handler(message):
        messages.append(message)
        first.set()

    sub = client.subscribe_to_events(_request(), handler)
    assert first.wait(5)

    sub.close()
    sub.close()
    assert sub.wait(5)
    time.sleep(0.1)

    assert sub.is_closed
    assert [type(m) for m in messages] == [EventReceived]


def test_close_from_inside_handler(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(3)
    store.hold_stream = True
    ready = threading.Event()
    holder = {}
    messages = []

    def handler(message):
        messages.append(message)
        ready.wait(5)
        holder["sub"].close()

    holder["sub"] = client.subscribe_to_events(_request(), handler)
    ready.set()

    assert holder["sub"].wait(5)
    assert [type(m) for m in messages] == [EventReceived]


def test_handler_failure_ends_subscription(client, fake_services):
    _, store, _ = fake_services
    store.stream_events = _events(3)
    messages = []

    def handler(message):
        messages.append(message)
        if isinstance(message, EventReceived):
            raise RuntimeError("projection broke")

    sub = client.subscribe_to_events(_request(), handler)
    assert sub.wait(5)
    assert [type(m) for m in messages] == [EventReceived, SubscriptionFailed]
    assert isinstance(messages[-1].error.cause, RuntimeError)


def test_subscriber_name_required(client, fake_services):
    _, store, _ = fake_services
    with pytest.raises(ValidationError, match="Subscriber name is required"):
        client.subscribe_to_events(_request(name="  "), lambda m: None)
    assert store.requests == []
