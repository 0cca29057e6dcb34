from __future__ import annotations

import base64
import threading
from typing import Any, Callable, Optional, Sequence, Tuple

import grpc

from orisun_client.core.logging_config import get_logger
from orisun_client.interceptors.middleware import Metadata


logger = get_logger(__name__)


AUTH_TOKEN_META_KEY = "x-auth-token"
# gRPC metadata keys travel lowercase; this is the HTTP Authorization header
AUTHORIZATION_META_KEY = "authorization"

CredentialSupplier = Callable[[], Optional[str]]


def basic_credentials(username: Optional[str], password: Optional[str]) -> CredentialSupplier:
    """Supplier for a ``Basic`` Authorization value, or None when no credentials were configured."""

    def _supplier() -> Optional[str]:
        if username is None or password is None:
            return None
        encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    return _supplier


class TokenCache:
    """Authentication state for the lifetime of one connection.

    Holds at most one session token and one memoized basic-credential string.
    A cached token always wins over basic credentials. Each field is replaced
    as a whole; concurrent writers race harmlessly (last writer wins).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._basic: Optional[str] = None

    @property
    def cached_token(self) -> Optional[str]:
        with self._lock:
            return self._token

    @property
    def cached_basic_credentials(self) -> Optional[str]:
        with self._lock:
            return self._basic

    def has_token(self) -> bool:
        return self.cached_token is not None

    def cache_token(self, token: Optional[str]) -> None:
        if token is None or not token.strip():
            return
        with self._lock:
            self._token = token
        logger.debug("auth_token_cached")

    def clear_token(self) -> None:
        with self._lock:
            self._token = None
        logger.debug("auth_token_cleared")

    def extract_and_cache_token(self, headers: Optional[Sequence[Tuple[str, Any]]]) -> None:
        if not headers:
            return
        for key, value in headers:
            if key.lower() != AUTH_TOKEN_META_KEY:
                continue
            if isinstance(value, bytes):
                value = value.decode("ascii", errors="ignore")
            if value and value.strip():
                self.cache_token(value)
                logger.debug("auth_token_extracted")
            return

    def build_auth_headers(self, supplier: Optional[CredentialSupplier] = None) -> dict[str, str]:
        token = self.cached_token
        if token is not None:
            return {AUTH_TOKEN_META_KEY: token}

        basic = self.cached_basic_credentials
        if basic is not None:
            return {AUTHORIZATION_META_KEY: basic}

        if supplier is not None:
            value = supplier()
            if value:
                with self._lock:
                    self._basic = value
                logger.debug("auth_basic_credentials_used")
                return {AUTHORIZATION_META_KEY: value}

        return {}


class AuthMiddleware:
    """Attaches cached credentials to outgoing calls and harvests session tokens from responses."""

    def __init__(self, cache: TokenCache, supplier: Optional[CredentialSupplier] = None) -> None:
        self.cache = cache
        self.supplier = supplier

    def before_call(self, method: str, metadata: Metadata) -> Metadata:
        auth = self.cache.build_auth_headers(self.supplier)
        if not auth:
            return metadata
        merged = [(k, v) for k, v in metadata if k.lower() not in auth]
        merged.extend(auth.items())
        return merged

    def on_headers(self, method: str, headers) -> None:
        self.cache.extract_and_cache_token(headers)

    def after_call(self, method: str, code: Optional[grpc.StatusCode], elapsed_ms: float) -> None:
        if code == grpc.StatusCode.UNAUTHENTICATED:
            logger.warning("grpc_auth_rejected", method=method)
