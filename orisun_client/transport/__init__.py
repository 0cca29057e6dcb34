from .channel import ManagedChannel, build_channel
from .executor import CallExecutor
from .subscription import (
    EventReceived,
    Subscription,
    SubscriptionCompleted,
    SubscriptionFailed,
    SubscriptionMessage,
    SubscriptionState,
    callbacks,
)
from .target import ResolvedTarget, resolve_target

__all__ = [
    "ManagedChannel",
    "build_channel",
    "CallExecutor",
    "EventReceived",
    "Subscription",
    "SubscriptionCompleted",
    "SubscriptionFailed",
    "SubscriptionMessage",
    "SubscriptionState",
    "callbacks",
    "ResolvedTarget",
    "resolve_target",
]
