"""HTTP Middleware - composable async middleware pipeline for httpx."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .client import MiddlewareClient
from .cache import InMemorySwrCache, SwrCache
from .core.background import BackgroundRunner
from .core.cached_response import CachedResponse
from .core.config import MiddlewareClientConfig, TimeoutConfig
from .core.context import ContextKey, MiddlewareContext
from .core.env_config import load_from_env
from .core.exceptions import (
    HTTPMiddlewareException,
    TransportError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    FatalError,
    RequestCloneError,
    MiddlewareChainError,
    InvalidKeyError,
    ConfigurationError,
)
from .core.logging import LoggingConfig, configure_logging, get_logger
from .core.pipeline import MiddlewarePipeline
from .core.response import MiddlewareResult
from .middlewares import (
    DedupMiddleware,
    FunctionMiddleware,
    HttpMiddleware,
    LoggingMiddleware,
    SwrMiddleware,
    middleware,
)

# NullHandler: no "No handler found" warnings; users configure
# logging.getLogger('http_middleware') themselves or via configure_logging()
logging.getLogger('http_middleware').addHandler(logging.NullHandler())

try:
    __version__ = version("http-middleware-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Client
    "MiddlewareClient",

    # Pipeline
    "MiddlewarePipeline",
    "MiddlewareContext",
    "MiddlewareResult",
    "ContextKey",
    "BackgroundRunner",
    "CachedResponse",

    # Middlewares
    "HttpMiddleware",
    "FunctionMiddleware",
    "middleware",
    "SwrMiddleware",
    "DedupMiddleware",
    "LoggingMiddleware",

    # Cache
    "SwrCache",
    "InMemorySwrCache",

    # Config
    "MiddlewareClientConfig",
    "TimeoutConfig",
    "load_from_env",

    # Logging
    "LoggingConfig",
    "configure_logging",
    "get_logger",

    # Exceptions
    "HTTPMiddlewareException",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "FatalError",
    "RequestCloneError",
    "MiddlewareChainError",
    "InvalidKeyError",
    "ConfigurationError",
]
