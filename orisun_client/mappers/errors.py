from __future__ import annotations

import re
from typing import Any, Optional

import grpc

from orisun_client.core.exceptions import (
    AuthError,
    OptimisticConcurrencyError,
    OrisunError,
    TransportError,
    VersionExtractionError,
)


SAVE_EVENTS_OPERATION = "saveEvents"

# The server reports version conflicts only inside the status description.
# If its wording changes this stops matching and VersionExtractionError is raised.
_VERSION_PATTERN = re.compile(r"Expected\s+(\d+),\s+Actual\s+(\d+)")

_INT64_MAX = 2**63 - 1

_AUTH_STATUS_CODES = {
    grpc.StatusCode.UNAUTHENTICATED,
    grpc.StatusCode.PERMISSION_DENIED,
}


def _status_of(error: BaseException) -> tuple[Optional[grpc.StatusCode], Optional[str]]:
    code = None
    details = None
    if isinstance(error, (grpc.RpcError, grpc.Call)):
        if callable(getattr(error, "code", None)):
            code = error.code()  # type: ignore[attr-defined]
        if callable(getattr(error, "details", None)):
            details = error.details()  # type: ignore[attr-defined]
    return code, details


def extract_version_numbers(description: Optional[str]) -> tuple[int, int]:
    """Parse ``Expected <int>, Actual <int>`` out of a conflict description."""
    match = _VERSION_PATTERN.search(description or "")
    if not match:
        raise VersionExtractionError(
            "Could not extract version numbers from error message",
            context={"statusDescription": description},
        )
    expected, actual = int(match.group(1)), int(match.group(2))
    if expected > _INT64_MAX or actual > _INT64_MAX:
        raise VersionExtractionError(
            "Failed to parse version numbers",
            context={"statusDescription": description},
        )
    return expected, actual


def translate_rpc_error(
    error: BaseException,
    operation: str,
    message: Optional[str] = None,
    **context: Any,
) -> OrisunError:
    """Map a failed call onto the client error hierarchy.

    Extra keyword arguments are added to the error context after the
    operation/status fields.
    """
    code, description = _status_of(error)
    ctx: dict[str, Any] = {
        "operation": operation,
        "statusCode": code.name if code is not None else None,
        "statusDescription": description,
    }
    ctx.update(context)

    if operation == SAVE_EVENTS_OPERATION and code == grpc.StatusCode.ALREADY_EXISTS:
        try:
            expected, actual = extract_version_numbers(description)
        except VersionExtractionError as exc:
            return VersionExtractionError(
                exc.message,
                cause=error,
                context=ctx,
                status_code=code,
                status_description=description,
            )
        ctx["expectedVersion"] = expected
        ctx["actualVersion"] = actual
        return OptimisticConcurrencyError(
            description or "Optimistic concurrency conflict",
            expected_version=expected,
            actual_version=actual,
            cause=error,
            context=ctx,
            status_code=code,
            status_description=description,
        )

    error_cls = AuthError if code in _AUTH_STATUS_CODES else TransportError
    return error_cls(
        message or f"Operation failed: {operation}",
        cause=error,
        context=ctx,
        status_code=code,
        status_description=description,
    )
