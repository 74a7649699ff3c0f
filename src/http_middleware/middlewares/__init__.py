"""Built-in middlewares."""

from .base import FunctionMiddleware, HttpMiddleware, MiddlewareNext, middleware
from .dedup_middleware import DedupMiddleware
from .keys import KeyGenerator, RequestPredicate, default_key
from .logging_middleware import LoggingMiddleware
from .swr_middleware import SwrMiddleware

__all__ = [
    "HttpMiddleware",
    "FunctionMiddleware",
    "MiddlewareNext",
    "middleware",
    "SwrMiddleware",
    "DedupMiddleware",
    "LoggingMiddleware",
    "KeyGenerator",
    "RequestPredicate",
    "default_key",
]
