"""Wire messages of the event store and admin services.

Message classes are built from file descriptors at import time; see ``_factory``.
"""
from . import admin, eventstore
from ._factory import RpcMethod

__all__ = ["admin", "eventstore", "RpcMethod"]
