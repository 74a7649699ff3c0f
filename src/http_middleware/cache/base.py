"""Cache storage interface used by SwrMiddleware."""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.cached_response import CachedResponse


class SwrCache(ABC):
    """
    Interface for cache backends used by :class:`SwrMiddleware`.

    All operations are coroutines so that backends can do I/O
    (Redis, SQLite, disk). The last ``set`` for a key wins.

    Example:
        >>> class RedisSwrCache(SwrCache):
        ...     async def get(self, key):
        ...         raw = await redis.get(key)
        ...         return pickle.loads(raw) if raw else None
        ...     ...
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[CachedResponse]:
        """Return the entry stored under ``key`` or ``None``."""

    @abstractmethod
    async def set(self, key: str, response: CachedResponse) -> None:
        """Store ``response`` under ``key``, replacing any previous entry."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete one entry (no-op if missing)."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete all entries."""
