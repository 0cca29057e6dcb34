"""Event store messages and RPCs (proto package ``eventstore``)."""
from __future__ import annotations

from ._factory import (
    ENUM,
    INT32,
    INT64,
    MESSAGE,
    STRING,
    TIMESTAMP,
    TIMESTAMP_PROTO,
    RpcMethod,
    enum,
    field,
    message,
    register_file,
)


PACKAGE = "eventstore"
SERVICE = "eventstore.EventStore"


def _t(name: str) -> str:
    return f".{PACKAGE}.{name}"


_types = register_file(
    "orisun/eventstore.proto",
    PACKAGE,
    enums=[enum("Direction", "ASC", "DESC")],
    messages=[
        message(
            "Position",
            field("commit_position", 1, INT64),
            field("prepare_position", 2, INT64),
        ),
        message(
            "Tag",
            field("key", 1, STRING),
            field("value", 2, STRING),
        ),
        message("Criterion", field("tags", 1, MESSAGE, _t("Tag"), repeated=True)),
        message("Query", field("criteria", 1, MESSAGE, _t("Criterion"), repeated=True)),
        message(
            "SaveQuery",
            field("expected_position", 1, MESSAGE, _t("Position")),
            field("subset_query", 2, MESSAGE, _t("Query")),
        ),
        message(
            "EventToSave",
            field("event_id", 1, STRING),
            field("event_type", 2, STRING),
            field("data", 3, STRING),
            field("metadata", 4, STRING),
        ),
        message(
            "SaveEventsRequest",
            field("query", 1, MESSAGE, _t("SaveQuery")),
            field("events", 2, MESSAGE, _t("EventToSave"), repeated=True),
            field("boundary", 3, STRING),
        ),
        message("WriteResult", field("log_position", 1, MESSAGE, _t("Position"))),
        message(
            "Event",
            field("event_id", 1, STRING),
            field("event_type", 2, STRING),
            field("data", 3, STRING),
            field("metadata", 4, STRING),
            field("position", 5, MESSAGE, _t("Position")),
            field("date_created", 6, MESSAGE, TIMESTAMP),
        ),
        message(
            "GetEventsRequest",
            field("query", 1, MESSAGE, _t("Query")),
            field("from_position", 2, MESSAGE, _t("Position")),
            field("count", 3, INT32),
            field("direction", 4, ENUM, _t("Direction")),
            field("boundary", 5, STRING),
        ),
        message("GetEventsResponse", field("events", 1, MESSAGE, _t("Event"), repeated=True)),
        message(
            "CatchUpSubscribeToEventStoreRequest",
            field("after_position", 1, MESSAGE, _t("Position")),
            field("query", 2, MESSAGE, _t("Query")),
            field("subscriber_name", 3, STRING),
            field("boundary", 4, STRING),
        ),
        message("PingRequest"),
        message("PingResponse"),
    ],
    dependencies=[TIMESTAMP_PROTO],
)

Direction = _types["Direction"]
Position = _types["Position"]
Tag = _types["Tag"]
Criterion = _types["Criterion"]
Query = _types["Query"]
SaveQuery = _types["SaveQuery"]
EventToSave = _types["EventToSave"]
SaveEventsRequest = _types["SaveEventsRequest"]
WriteResult = _types["WriteResult"]
Event = _types["Event"]
GetEventsRequest = _types["GetEventsRequest"]
GetEventsResponse = _types["GetEventsResponse"]
CatchUpSubscribeToEventStoreRequest = _types["CatchUpSubscribeToEventStoreRequest"]
PingRequest = _types["PingRequest"]
PingResponse = _types["PingResponse"]


SAVE_EVENTS = RpcMethod(SERVICE, "SaveEvents", SaveEventsRequest, WriteResult)
GET_EVENTS = RpcMethod(SERVICE, "GetEvents", GetEventsRequest, GetEventsResponse)
CATCH_UP_SUBSCRIBE_TO_EVENTS = RpcMethod(
    SERVICE,
    "CatchUpSubscribeToEvents",
    CatchUpSubscribeToEventStoreRequest,
    Event,
    server_streaming=True,
)
PING = RpcMethod(SERVICE, "Ping", PingRequest, PingResponse)

METHODS = (SAVE_EVENTS, GET_EVENTS, CATCH_UP_SUBSCRIBE_TO_EVENTS, PING)
