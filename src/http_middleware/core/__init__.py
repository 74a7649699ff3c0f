"""Core: context, pipeline, background runner, config and exceptions."""

from .background import BackgroundRunner
from .cached_response import CachedResponse
from .config import MiddlewareClientConfig, TimeoutConfig
from .context import (
    DEDUP_KEY,
    DEDUP_SHARED,
    IS_BACKGROUND,
    IS_FROM_CACHE,
    REQUEST_ID,
    SWR_CACHE_KEY,
    SWR_REVALIDATING,
    ContextKey,
    MiddlewareContext,
    clone_request,
)
from .pipeline import MiddlewarePipeline, Transport
from .response import MiddlewareResult

__all__ = [
    "BackgroundRunner",
    "CachedResponse",
    "MiddlewareClientConfig",
    "TimeoutConfig",
    "ContextKey",
    "MiddlewareContext",
    "clone_request",
    "IS_BACKGROUND",
    "IS_FROM_CACHE",
    "REQUEST_ID",
    "SWR_CACHE_KEY",
    "SWR_REVALIDATING",
    "DEDUP_KEY",
    "DEDUP_SHARED",
    "MiddlewarePipeline",
    "Transport",
    "MiddlewareResult",
]
