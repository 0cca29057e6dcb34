from .admin import AdminClient
from .base import BaseClient
from .eventstore import OrisunClient

__all__ = ["AdminClient", "BaseClient", "OrisunClient"]
