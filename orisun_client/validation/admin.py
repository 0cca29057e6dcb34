"""用户管理请求的本地校验"""
from __future__ import annotations

from orisun_client.validation._common import fail, is_blank, is_uuid, require


MIN_PASSWORD_LENGTH = 8

CREATE_USER = "createUser"
DELETE_USER = "deleteUser"
CHANGE_PASSWORD = "changePassword"
LIST_USERS = "listUsers"
VALIDATE_CREDENTIALS = "validateCredentials"
GET_USER_COUNT = "getUserCount"
GET_EVENT_COUNT = "getEventCount"


def validate_create_user_request(request) -> None:
    require(request, "CreateUserRequest", CREATE_USER)
    if is_blank(request.name):
        fail("Name is required", CREATE_USER)
    if is_blank(request.username):
        fail("Username is required", CREATE_USER)
    if is_blank(request.password):
        fail("Password is required", CREATE_USER)
    if len(request.password) < MIN_PASSWORD_LENGTH:
        fail(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            CREATE_USER,
            username=request.username,
        )


def _validate_user_id(user_id: str, operation: str) -> None:
    if is_blank(user_id):
        fail("User ID is required", operation)
    if not is_uuid(user_id):
        fail("Invalid user ID format", operation, userId=user_id)


def validate_delete_user_request(request) -> None:
    require(request, "DeleteUserRequest", DELETE_USER)
    _validate_user_id(request.user_id, DELETE_USER)


def validate_change_password_request(request) -> None:
    require(request, "ChangePasswordRequest", CHANGE_PASSWORD)
    _validate_user_id(request.user_id, CHANGE_PASSWORD)
    user_id = request.user_id
    if is_blank(request.current_password):
        fail("Current password is required", CHANGE_PASSWORD, userId=user_id)
    if is_blank(request.new_password):
        fail("New password is required", CHANGE_PASSWORD, userId=user_id)
    if len(request.new_password) < MIN_PASSWORD_LENGTH:
        fail(f"New password must be at least {MIN_PASSWORD_LENGTH} characters", CHANGE_PASSWORD, userId=user_id)
    if request.current_password == request.new_password:
        fail("New password must be different from current password", CHANGE_PASSWORD, userId=user_id)


def validate_list_users_request(request) -> None:
    require(request, "ListUsersRequest", LIST_USERS)


def validate_validate_credentials_request(request) -> None:
    require(request, "ValidateCredentialsRequest", VALIDATE_CREDENTIALS)
    if is_blank(request.username):
        fail("Username is required", VALIDATE_CREDENTIALS)
    if is_blank(request.password):
        fail("Password is required", VALIDATE_CREDENTIALS, username=request.username)


def validate_get_user_count_request(request) -> None:
    require(request, "GetUserCountRequest", GET_USER_COUNT)


def validate_get_event_count_request(request) -> None:
    require(request, "GetEventCountRequest", GET_EVENT_COUNT)
    if is_blank(request.boundary):
        fail("Boundary is required", GET_EVENT_COUNT)
