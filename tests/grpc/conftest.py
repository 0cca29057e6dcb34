"""In-process fake Orisun services for client tests.

The services are plain grpc generic handlers on an ephemeral port (port 0),
backed by the runtime-built message classes, so no generated stubs are needed.
"""
import threading
import time
import uuid
from concurrent import futures
from typing import Any, List, Optional, Tuple

import grpc
import pytest

from orisun_client.interceptors.auth import AUTH_TOKEN_META_KEY
from orisun_client.protos import admin as admin_pb
from orisun_client.protos import eventstore as es_pb


def _unary(fn, method):
    return grpc.unary_unary_rpc_method_handler(
        fn,
        request_deserializer=method.request_type.FromString,
        response_serializer=method.response_type.SerializeToString,
    )


def _stream(fn, method):
    return grpc.unary_stream_rpc_method_handler(
        fn,
        request_deserializer=method.request_type.FromString,
        response_serializer=method.response_type.SerializeToString,
    )


class FakeEventStore:
    def __init__(self) -> None:
        self.requests: List[Tuple[str, Any, dict]] = []
        self._lock = threading.Lock()
        self.issue_token: Optional[str] = None
        self.save_error: Optional[Tuple[grpc.StatusCode, str]] = None
        self.save_delay = 0.0
        self.ping_delay = 0.0
        self.stream_events: List[Any] = []
        self.stream_error: Optional[Tuple[grpc.StatusCode, str]] = None
        self.hold_stream = False
        self.stored: List[Any] = []

    def _record(self, name: str, request, context) -> None:
        with self._lock:
            self.requests.append((name, request, dict(context.invocation_metadata())))
        if self.issue_token:
            context.send_initial_metadata(((AUTH_TOKEN_META_KEY, self.issue_token),))

    def calls(self, name: str) -> List[Tuple[Any, dict]]:
        with self._lock:
            return [(req, meta) for n, req, meta in self.requests if n == name]

    def SaveEvents(self, request, context):
        self._record("SaveEvents", request, context)
        if self.save_delay:
            time.sleep(self.save_delay)
        if self.save_error:
            context.abort(*self.save_error)
        self.stored.extend(request.events)
        position = len(self.stored)
        return es_pb.WriteResult(log_position=es_pb.Position(commit_position=position, prepare_position=position))

    def GetEvents(self, request, context):
        self._record("GetEvents", request, context)
        events = [
            es_pb.Event(event_id=e.event_id, event_type=e.event_type, data=e.data, metadata=e.metadata)
            for e in self.stored[: request.count]
        ]
        return es_pb.GetEventsResponse(events=events)

    def Ping(self, request, context):
        self._record("Ping", request, context)
        if self.ping_delay:
            time.sleep(self.ping_delay)
        return es_pb.PingResponse()

    def CatchUpSubscribeToEvents(self, request, context):
        self._record("CatchUpSubscribeToEvents", request, context)
        for event in self.stream_events:
            yield event
        if self.stream_error:
            context.abort(*self.stream_error)
        while self.hold_stream and context.is_active():
            time.sleep(0.02)

    def handler(self):
        return grpc.method_handlers_generic_handler(
            es_pb.SERVICE,
            {
                "SaveEvents": _unary(self.SaveEvents, es_pb.SAVE_EVENTS),
                "GetEvents": _unary(self.GetEvents, es_pb.GET_EVENTS),
                "Ping": _unary(self.Ping, es_pb.PING),
                "CatchUpSubscribeToEvents": _stream(
                    self.CatchUpSubscribeToEvents, es_pb.CATCH_UP_SUBSCRIBE_TO_EVENTS
                ),
            },
        )


class FakeAdmin:
    def __init__(self) -> None:
        self.requests: List[Tuple[str, Any, dict]] = []
        self.users = {}
        self.event_counts = {}

    def _record(self, name: str, request, context) -> None:
        self.requests.append((name, request, dict(context.invocation_metadata())))

    def CreateUser(self, request, context):
        self._record("CreateUser", request, context)
        user = admin_pb.AdminUser(
            name=request.name,
            username=request.username,
            user_id=str(uuid.uuid4()),
            roles=list(request.roles),
        )
        self.users[user.user_id] = (user, request.password)
        return admin_pb.CreateUserResponse(user=user)

    def DeleteUser(self, request, context):
        self._record("DeleteUser", request, context)
        if request.user_id not in self.users:
            context.abort(grpc.StatusCode.NOT_FOUND, "user not found")
        del self.users[request.user_id]
        return admin_pb.DeleteUserResponse(success=True)

    def ChangePassword(self, request, context):
        self._record("ChangePassword", request, context)
        user, password = self.users[request.user_id]
        if password != request.current_password:
            context.abort(grpc.StatusCode.PERMISSION_DENIED, "wrong password")
        self.users[request.user_id] = (user, request.new_password)
        return admin_pb.ChangePasswordResponse(success=True)

    def ListUsers(self, request, context):
        self._record("ListUsers", request, context)
        return admin_pb.ListUsersResponse(users=[user for user, _ in self.users.values()])

    def ValidateCredentials(self, request, context):
        self._record("ValidateCredentials", request, context)
        for user, password in self.users.values():
            if user.username == request.username and password == request.password:
                return admin_pb.ValidateCredentialsResponse(success=True, user=user)
        return admin_pb.ValidateCredentialsResponse(success=False)

    def GetUserCount(self, request, context):
        self._record("GetUserCount", request, context)
        return admin_pb.GetUserCountResponse(count=len(self.users))

    def GetEventCount(self, request, context):
        self._record("GetEventCount", request, context)
        return admin_pb.GetEventCountResponse(count=self.event_counts.get(request.boundary, 0))

    def handler(self):
        methods = {
            "CreateUser": (self.CreateUser, admin_pb.CREATE_USER),
            "DeleteUser": (self.DeleteUser, admin_pb.DELETE_USER),
            "ChangePassword": (self.ChangePassword, admin_pb.CHANGE_PASSWORD),
            "ListUsers": (self.ListUsers, admin_pb.LIST_USERS),
            "ValidateCredentials": (self.ValidateCredentials, admin_pb.VALIDATE_CREDENTIALS),
            "GetUserCount": (self.GetUserCount, admin_pb.GET_USER_COUNT),
            "GetEventCount": (self.GetEventCount, admin_pb.GET_EVENT_COUNT),
        }
        return grpc.method_handlers_generic_handler(
            admin_pb.SERVICE,
            {name: _unary(fn, method) for name, (fn, method) in methods.items()},
        )


@pytest.fixture
def fake_services():
    """Start both fake services on one in-process server; yields (port, eventstore, admin)."""
    store = FakeEventStore()
    admin = FakeAdmin()
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=8))
    server.add_generic_rpc_handlers((store.handler(), admin.handler()))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    try:
        yield port, store, admin
    finally:
        store.hold_stream = False
        server.stop(grace=None)


@pytest.fixture
def connection_config(fake_services):
    from orisun_client.core.config import ConnectionConfig, ServerAddress

    port = fake_services[0]
    return ConnectionConfig(
        servers=[ServerAddress(host="127.0.0.1", port=port)],
        default_timeout_seconds=5,
        shutdown_grace_seconds=1.0,
    )
