import uuid

import pytest

from orisun_client.core.exceptions import ValidationError
from orisun_client.protos import admin as admin_pb
from orisun_client.protos import eventstore as es_pb
from orisun_client.validation import (
    validate_change_password_request,
    validate_create_user_request,
    validate_delete_user_request,
    validate_get_event_count_request,
    validate_get_events_request,
    validate_save_events_request,
    validate_subscribe_request,
    validate_validate_credentials_request,
)


USER_ID = "2f1c7a3e-9b44-4b65-8d2e-6a9d3c1f0b7a"


def _event(**overrides):
    fields = {"event_id": str(uuid.uuid4()), "event_type": "OrderPlaced", "data": "{}"}
    fields.update(overrides)
    return es_pb.EventToSave(**fields)


def _fails(fn, request, message):
    with pytest.raises(ValidationError) as ei:
        fn(request)
    assert ei.value.message == message
    return ei.value


def test_save_events_valid():
    validate_save_events_request(es_pb.SaveEventsRequest(boundary="orders", events=[_event()]))


def test_save_events_rules():
    _fails(validate_save_events_request, None, "SaveEventsRequest cannot be null")
    _fails(validate_save_events_request, es_pb.SaveEventsRequest(events=[_event()]), "Boundary is required")
    _fails(validate_save_events_request, es_pb.SaveEventsRequest(boundary="b"), "At least one event is required")

    err = _fails(
        validate_save_events_request,
        es_pb.SaveEventsRequest(boundary="b", events=[_event(), _event(event_id="")]),
        "Event at index 1 is missing eventId",
    )
    assert err.get_context("eventIndex") == 1
    assert err.get_context("operation") == "saveEvents"

    err = _fails(
        validate_save_events_request,
        es_pb.SaveEventsRequest(boundary="b", events=[_event(event_id="nope")]),
        "Event at index 0 has invalid eventId format",
    )
    assert err.get_context("eventId") == "nope"

    _fails(
        validate_save_events_request,
        es_pb.SaveEventsRequest(boundary="b", events=[_event(event_type=" ")]),
        "Event at index 0 is missing eventType",
    )
    _fails(
        validate_save_events_request,
        es_pb.SaveEventsRequest(boundary="b", events=[_event(data="")]),
        "Event at index 0 is missing data",
    )


def test_get_events_rules():
    _fails(validate_get_events_request, es_pb.GetEventsRequest(count=1), "Boundary is required")
    err = _fails(validate_get_events_request, es_pb.GetEventsRequest(boundary="b"), "Count must be greater than 0")
    assert err.get_context("count") == 0


def test_subscribe_rules():
    _fails(validate_subscribe_request, es_pb.CatchUpSubscribeToEventStoreRequest(subscriber_name="s"), "Boundary is required")
    _fails(
        validate_subscribe_request,
        es_pb.CatchUpSubscribeToEventStoreRequest(boundary="b"),
        "Subscriber name is required",
    )


def test_create_user_rules():
    request = admin_pb.CreateUserRequest
    _fails(validate_create_user_request, request(username="u", password="password"), "Name is required")
    _fails(validate_create_user_request, request(name="n", password="password"), "Username is required")
    _fails(validate_create_user_request, request(name="n", username="u"), "Password is required")
    _fails(
        validate_create_user_request,
        request(name="n", username="u", password="1234567"),
        "Password must be at least 8 characters",
    )
    validate_create_user_request(request(name="n", username="u", password="12345678"))


def test_user_id_rules():
    _fails(validate_delete_user_request, admin_pb.DeleteUserRequest(), "User ID is required")
    _fails(validate_delete_user_request, admin_pb.DeleteUserRequest(user_id="not-a-uuid"), "Invalid user ID format")
    validate_delete_user_request(admin_pb.DeleteUserRequest(user_id=USER_ID))


def test_change_password_rules():
    request = admin_pb.ChangePasswordRequest
    _fails(
        validate_change_password_request,
        request(user_id=USER_ID, new_password="password2"),
        "Current password is required",
    )
    _fails(
        validate_change_password_request,
        request(user_id=USER_ID, current_password="password1"),
        "New password is required",
    )
    validate_change_password_request(request(user_id=USER_ID, current_password="password1", new_password="password2"))


def test_validate_credentials_rules():
    request = admin_pb.ValidateCredentialsRequest
    _fails(validate_validate_credentials_request, request(password="p"), "Username is required")
    err = _fails(validate_validate_credentials_request, request(username="u"), "Password is required")
    assert err.get_context("username") == "u"


def test_get_event_count_rules():
    err = _fails(validate_get_event_count_request, admin_pb.GetEventCountRequest(), "Boundary is required")
    assert err.get_context("operation") == "getEventCount"
