from __future__ import annotations

from typing import Optional

import grpc

from orisun_client.core.logging_config import get_logger
from orisun_client.interceptors.middleware import Metadata


logger = get_logger(__name__)


class LoggingMiddleware:
    def before_call(self, method: str, metadata: Metadata) -> Metadata:
        # Only header names; values may carry credentials
        logger.debug("grpc_request", method=method, metadata_keys=[k for k, _ in metadata])
        return metadata

    def on_headers(self, method: str, headers) -> None:
        return None

    def after_call(self, method: str, code: Optional[grpc.StatusCode], elapsed_ms: float) -> None:
        status = code.name if code is not None else None
        if code is None or code == grpc.StatusCode.OK:
            logger.debug("grpc_request_done", method=method, status=status, elapsed_ms=round(elapsed_ms, 2))
        else:
            logger.info("grpc_request_failed", method=method, status=status, elapsed_ms=round(elapsed_ms, 2))
