from __future__ import annotations

import uuid
from typing import Any, NoReturn, Optional

from orisun_client.core.exceptions import ValidationError


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def fail(message: str, operation: str, **context: Any) -> NoReturn:
    raise ValidationError(message, context={"operation": operation, **context})


def require(request: Any, name: str, operation: str) -> None:
    if request is None:
        fail(f"{name} cannot be null", operation)
