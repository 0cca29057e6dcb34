"""Orisun event store client.

Authenticated access to the Orisun append-only event log and its user
administration service over gRPC.
"""
from .clients import AdminClient, BaseClient, OrisunClient
from .core.config import ClientSettings, ConnectionConfig, ServerAddress, TlsSettings
from .core.exceptions import (
    AuthError,
    ConfigurationError,
    OptimisticConcurrencyError,
    OrisunError,
    TransportError,
    ValidationError,
    VersionExtractionError,
)
from .core.logging_config import configure_logging
from .interceptors import TokenCache
from .protos import admin, eventstore
from .transport import (
    EventReceived,
    Subscription,
    SubscriptionCompleted,
    SubscriptionFailed,
    SubscriptionState,
    callbacks,
)

__version__ = "0.1.0"

__all__ = [
    "AdminClient",
    "BaseClient",
    "OrisunClient",
    "ClientSettings",
    "ConnectionConfig",
    "ServerAddress",
    "TlsSettings",
    "AuthError",
    "ConfigurationError",
    "OptimisticConcurrencyError",
    "OrisunError",
    "TransportError",
    "ValidationError",
    "VersionExtractionError",
    "configure_logging",
    "TokenCache",
    "admin",
    "eventstore",
    "EventReceived",
    "Subscription",
    "SubscriptionCompleted",
    "SubscriptionFailed",
    "SubscriptionState",
    "callbacks",
]
