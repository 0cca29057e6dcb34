"""事件存储请求的本地校验

校验失败抛出 ValidationError，不会发起任何网络调用。
"""
from __future__ import annotations

from orisun_client.validation._common import fail, is_blank, is_uuid, require


SAVE_EVENTS = "saveEvents"
GET_EVENTS = "getEvents"
SUBSCRIBE_TO_EVENTS = "subscribeToEvents"


def validate_save_events_request(request) -> None:
    require(request, "SaveEventsRequest", SAVE_EVENTS)
    if is_blank(request.boundary):
        fail("Boundary is required", SAVE_EVENTS, request="SaveEventsRequest")
    if len(request.events) == 0:
        fail("At least one event is required", SAVE_EVENTS, boundary=request.boundary)
    for index, event in enumerate(request.events):
        _validate_event_to_save(event, index, request.boundary)


def _validate_event_to_save(event, index: int, boundary: str) -> None:
    if is_blank(event.event_id):
        fail(f"Event at index {index} is missing eventId", SAVE_EVENTS, eventIndex=index, boundary=boundary)
    if not is_uuid(event.event_id):
        fail(
            f"Event at index {index} has invalid eventId format",
            SAVE_EVENTS,
            eventIndex=index,
            eventId=event.event_id,
            boundary=boundary,
        )
    if is_blank(event.event_type):
        fail(f"Event at index {index} is missing eventType", SAVE_EVENTS, eventIndex=index, boundary=boundary)
    if is_blank(event.data):
        fail(f"Event at index {index} is missing data", SAVE_EVENTS, eventIndex=index, boundary=boundary)


def validate_get_events_request(request) -> None:
    require(request, "GetEventsRequest", GET_EVENTS)
    if is_blank(request.boundary):
        fail("Boundary is required", GET_EVENTS, request="GetEventsRequest")
    if request.count <= 0:
        fail("Count must be greater than 0", GET_EVENTS, count=request.count, boundary=request.boundary)


def validate_subscribe_request(request) -> None:
    require(request, "SubscribeRequest", SUBSCRIBE_TO_EVENTS)
    if is_blank(request.boundary):
        fail("Boundary is required", SUBSCRIBE_TO_EVENTS, request="CatchUpSubscribeToEventStoreRequest")
    if is_blank(request.subscriber_name):
        fail("Subscriber name is required", SUBSCRIBE_TO_EVENTS, boundary=request.boundary)
