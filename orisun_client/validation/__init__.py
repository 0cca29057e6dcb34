from .admin import (
    validate_change_password_request,
    validate_create_user_request,
    validate_delete_user_request,
    validate_get_event_count_request,
    validate_get_user_count_request,
    validate_list_users_request,
    validate_validate_credentials_request,
)
from .eventstore import (
    validate_get_events_request,
    validate_save_events_request,
    validate_subscribe_request,
)

__all__ = [
    "validate_change_password_request",
    "validate_create_user_request",
    "validate_delete_user_request",
    "validate_get_event_count_request",
    "validate_get_user_count_request",
    "validate_list_users_request",
    "validate_validate_credentials_request",
    "validate_get_events_request",
    "validate_save_events_request",
    "validate_subscribe_request",
]
