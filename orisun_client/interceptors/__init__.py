from .auth import AuthMiddleware, TokenCache, basic_credentials
from .logging import LoggingMiddleware
from .middleware import CallMiddleware, MiddlewareInterceptor

__all__ = [
    "AuthMiddleware",
    "TokenCache",
    "basic_credentials",
    "LoggingMiddleware",
    "CallMiddleware",
    "MiddlewareInterceptor",
]
