"""用户管理客户端"""
from __future__ import annotations

from typing import Any, Optional

from orisun_client.core.logging_config import get_logger
from orisun_client.protos import RpcMethod
from orisun_client.protos import admin as pb
from orisun_client.validation import admin as checks

from .base import BaseClient


logger = get_logger(__name__)


class AdminClient(BaseClient):
    """User administration client."""

    def _call(self, method: RpcMethod, request: Any, operation: str, timeout: Optional[float] = None) -> Any:
        return self._executor.unary(
            method,
            request,
            operation,
            timeout=timeout,
            message=f"Admin operation failed: {operation}",
        )

    def create_user(self, request: pb.CreateUserRequest, timeout: Optional[float] = None) -> pb.AdminUser:
        checks.validate_create_user_request(request)
        logger.debug("create_user", username=request.username)
        response = self._call(pb.CREATE_USER, request, checks.CREATE_USER, timeout)
        logger.info("user_created", user_id=response.user.user_id)
        return response.user

    def delete_user(self, request: pb.DeleteUserRequest, timeout: Optional[float] = None) -> bool:
        checks.validate_delete_user_request(request)
        logger.debug("delete_user", user_id=request.user_id)
        response = self._call(pb.DELETE_USER, request, checks.DELETE_USER, timeout)
        logger.info("user_deleted", user_id=request.user_id)
        return response.success

    def change_password(self, request: pb.ChangePasswordRequest, timeout: Optional[float] = None) -> bool:
        checks.validate_change_password_request(request)
        logger.debug("change_password", user_id=request.user_id)
        response = self._call(pb.CHANGE_PASSWORD, request, checks.CHANGE_PASSWORD, timeout)
        logger.info("password_changed", user_id=request.user_id)
        return response.success

    def list_users(self, request: Optional[pb.ListUsersRequest] = None, timeout: Optional[float] = None) -> list:
        request = request if request is not None else pb.ListUsersRequest()
        checks.validate_list_users_request(request)
        response = self._call(pb.LIST_USERS, request, checks.LIST_USERS, timeout)
        logger.debug("users_listed", users=len(response.users))
        return list(response.users)

    def validate_credentials(
        self, request: pb.ValidateCredentialsRequest, timeout: Optional[float] = None
    ) -> pb.ValidateCredentialsResponse:
        checks.validate_validate_credentials_request(request)
        response = self._call(pb.VALIDATE_CREDENTIALS, request, checks.VALIDATE_CREDENTIALS, timeout)
        if response.success:
            logger.info("credentials_valid", username=request.username)
        else:
            logger.warning("credentials_invalid", username=request.username)
        return response

    def get_user_count(self, request: Optional[pb.GetUserCountRequest] = None, timeout: Optional[float] = None) -> int:
        request = request if request is not None else pb.GetUserCountRequest()
        checks.validate_get_user_count_request(request)
        response = self._call(pb.GET_USER_COUNT, request, checks.GET_USER_COUNT, timeout)
        logger.debug("user_count", count=response.count)
        return response.count

    def get_event_count(self, request, timeout: Optional[float] = None) -> int:
        """Accepts a GetEventCountRequest or a boundary name."""
        if isinstance(request, str):
            request = pb.GetEventCountRequest(boundary=request)
        checks.validate_get_event_count_request(request)
        response = self._call(pb.GET_EVENT_COUNT, request, checks.GET_EVENT_COUNT, timeout)
        logger.debug("event_count", boundary=request.boundary, count=response.count)
        return response.count
