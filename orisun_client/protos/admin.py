"""Admin service messages and RPCs (proto package ``admin``)."""
from __future__ import annotations

from ._factory import (
    BOOL,
    INT64,
    MESSAGE,
    STRING,
    TIMESTAMP,
    TIMESTAMP_PROTO,
    RpcMethod,
    field,
    message,
    register_file,
)


PACKAGE = "admin"
SERVICE = "admin.Admin"

_USER = ".admin.AdminUser"

_types = register_file(
    "orisun/admin.proto",
    PACKAGE,
    messages=[
        message(
            "AdminUser",
            field("name", 1, STRING),
            field("username", 2, STRING),
            field("user_id", 3, STRING),
            field("roles", 4, STRING, repeated=True),
            field("created_at", 5, MESSAGE, TIMESTAMP),
            field("updated_at", 6, MESSAGE, TIMESTAMP),
        ),
        message(
            "CreateUserRequest",
            field("name", 1, STRING),
            field("username", 2, STRING),
            field("password", 3, STRING),
            field("roles", 4, STRING, repeated=True),
        ),
        message("CreateUserResponse", field("user", 1, MESSAGE, _USER)),
        message("DeleteUserRequest", field("user_id", 1, STRING)),
        message("DeleteUserResponse", field("success", 1, BOOL)),
        message(
            "ChangePasswordRequest",
            field("user_id", 1, STRING),
            field("current_password", 2, STRING),
            field("new_password", 3, STRING),
        ),
        message("ChangePasswordResponse", field("success", 1, BOOL)),
        message("ListUsersRequest"),
        message("ListUsersResponse", field("users", 1, MESSAGE, _USER, repeated=True)),
        message(
            "ValidateCredentialsRequest",
            field("username", 1, STRING),
            field("password", 2, STRING),
        ),
        message(
            "ValidateCredentialsResponse",
            field("success", 1, BOOL),
            field("user", 2, MESSAGE, _USER),
        ),
        message("GetUserCountRequest"),
        message("GetUserCountResponse", field("count", 1, INT64)),
        message("GetEventCountRequest", field("boundary", 1, STRING)),
        message("GetEventCountResponse", field("count", 1, INT64)),
    ],
    dependencies=[TIMESTAMP_PROTO],
)

AdminUser = _types["AdminUser"]
CreateUserRequest = _types["CreateUserRequest"]
CreateUserResponse = _types["CreateUserResponse"]
DeleteUserRequest = _types["DeleteUserRequest"]
DeleteUserResponse = _types["DeleteUserResponse"]
ChangePasswordRequest = _types["ChangePasswordRequest"]
ChangePasswordResponse = _types["ChangePasswordResponse"]
ListUsersRequest = _types["ListUsersRequest"]
ListUsersResponse = _types["ListUsersResponse"]
ValidateCredentialsRequest = _types["ValidateCredentialsRequest"]
ValidateCredentialsResponse = _types["ValidateCredentialsResponse"]
GetUserCountRequest = _types["GetUserCountRequest"]
GetUserCountResponse = _types["GetUserCountResponse"]
GetEventCountRequest = _types["GetEventCountRequest"]
GetEventCountResponse = _types["GetEventCountResponse"]


CREATE_USER = RpcMethod(SERVICE, "CreateUser", CreateUserRequest, CreateUserResponse)
DELETE_USER = RpcMethod(SERVICE, "DeleteUser", DeleteUserRequest, DeleteUserResponse)
CHANGE_PASSWORD = RpcMethod(SERVICE, "ChangePassword", ChangePasswordRequest, ChangePasswordResponse)
LIST_USERS = RpcMethod(SERVICE, "ListUsers", ListUsersRequest, ListUsersResponse)
VALIDATE_CREDENTIALS = RpcMethod(SERVICE, "ValidateCredentials", ValidateCredentialsRequest, ValidateCredentialsResponse)
GET_USER_COUNT = RpcMethod(SERVICE, "GetUserCount", GetUserCountRequest, GetUserCountResponse)
GET_EVENT_COUNT = RpcMethod(SERVICE, "GetEventCount", GetEventCountRequest, GetEventCountResponse)

METHODS = (
    CREATE_USER,
    DELETE_USER,
    CHANGE_PASSWORD,
    LIST_USERS,
    VALIDATE_CREDENTIALS,
    GET_USER_COUNT,
    GET_EVENT_COUNT,
)
