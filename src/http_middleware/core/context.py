"""Request context passed through the middleware chain."""

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

import httpx

from .exceptions import RequestCloneError

T = TypeVar("T")


@dataclass(frozen=True)
class ContextKey(Generic[T]):
    """Typed key for values stored in :attr:`MiddlewareContext.metadata`.

    The metadata bag stays a plain ``dict`` so that any middleware can put
    arbitrary data on it. ``ContextKey`` gives a typed view on one entry.

    Example:
        >>> STARTED_AT: ContextKey[float] = ContextKey("timing:startedAt", 0.0)
        >>> ctx.set(STARTED_AT, time.monotonic())
        >>> elapsed = time.monotonic() - ctx.get(STARTED_AT)
    """

    name: str
    default: Optional[T] = None


# Reserved flags (keys starting with "_" are internal)
IS_BACKGROUND: ContextKey[bool] = ContextKey("_isBackground", False)
IS_FROM_CACHE: ContextKey[bool] = ContextKey("_isFromCache", False)

# Well-known keys set by built-in middlewares
REQUEST_ID: ContextKey[str] = ContextKey("request:id")
SWR_CACHE_KEY: ContextKey[str] = ContextKey("swr:cacheKey")
SWR_REVALIDATING: ContextKey[bool] = ContextKey("swr:revalidating", False)
DEDUP_KEY: ContextKey[str] = ContextKey("dedup:key")
DEDUP_SHARED: ContextKey[bool] = ContextKey("dedup:shared", False)


def clone_request(request: httpx.Request) -> httpx.Request:
    """Create an independent copy of ``request`` that can be sent again.

    Method, URL, headers, body bytes and extensions are copied. Requests
    whose body is a single-use stream (generators, file-like streams that
    were never buffered) can't be replayed and raise :class:`RequestCloneError`.
    Call ``request.read()`` beforehand to buffer a re-iterable body.
    """
    try:
        content = request.content
    except httpx.RequestNotRead:
        raise RequestCloneError(
            "Streaming request body cannot be cloned for background operations. "
            "Buffer the body before sending",
            method=request.method,
            url=str(request.url),
        ) from None

    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=content,
        extensions=copy.copy(request.extensions),
    )


@dataclass
class MiddlewareContext:
    """Context passed through the middleware chain during one pipeline run.

    Attributes:
        request: The HTTP request being processed
        metadata: Shared storage for middlewares to communicate
        request_id: Unique identifier of the logical call (kept by copies)

    Conventions for metadata keys:
        - Use a prefix to avoid collisions (``'swr:cacheKey'``)
        - Keys starting with an underscore are reserved

    Example:
        >>> ctx = MiddlewareContext(httpx.Request('GET', 'https://api.example.com/users'))
        >>> ctx.metadata['timing:start'] = time.monotonic()
        >>> ctx.mark_as_background()
        >>> ctx.is_background
        True
    """

    request: httpx.Request
    metadata: Dict[str, Any] = field(default_factory=dict)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def get(self, key: ContextKey[T]) -> Optional[T]:
        """Read a typed metadata value (``key.default`` if absent)."""
        return self.metadata.get(key.name, key.default)

    def set(self, key: ContextKey[T], value: T) -> None:
        """Store a typed metadata value."""
        self.metadata[key.name] = value

    @property
    def is_from_cache(self) -> bool:
        """True if the response for this context was served from cache."""
        return self.metadata.get(IS_FROM_CACHE.name) is True

    @property
    def is_background(self) -> bool:
        """True if this context runs as a background continuation."""
        return self.metadata.get(IS_BACKGROUND.name) is True

    def mark_as_from_cache(self) -> None:
        self.set(IS_FROM_CACHE, True)

    def mark_as_background(self) -> None:
        self.set(IS_BACKGROUND, True)

    def copy(
        self,
        request: Optional[httpx.Request] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> 'MiddlewareContext':
        """Create a copy sharing the same request and a shallow metadata copy."""
        return MiddlewareContext(
            request=request if request is not None else self.request,
            metadata=metadata if metadata is not None else dict(self.metadata),
            request_id=self.request_id,
        )

    def copy_for_background(self) -> 'MiddlewareContext':
        """Create a copy whose request is cloned so it can be sent a second time.

        Raises:
            RequestCloneError: the request body is a single-use stream
        """
        return MiddlewareContext(
            request=clone_request(self.request),
            metadata=dict(self.metadata),
            request_id=self.request_id,
        )

    def __repr__(self) -> str:
        return (
            f"MiddlewareContext(request={self.request.method} {self.request.url}, "
            f"metadata={self.metadata!r})"
        )
