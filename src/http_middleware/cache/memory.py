"""In-memory cache backend."""

import logging
from typing import Dict, Iterator, List, Optional

from ..core.cached_response import CachedResponse
from .base import SwrCache

logger = logging.getLogger(__name__)


class InMemorySwrCache(SwrCache):
    """
    Dict-backed :class:`SwrCache`.

    Meant for tests and simple applications. There is no persistence,
    no size limit and no TTL: entries live until removed.

    Example:
        >>> cache = InMemorySwrCache()
        >>> client = MiddlewareClient(middlewares=[SwrMiddleware(cache=cache)])
    """

    def __init__(self):
        self._cache: Dict[str, CachedResponse] = {}

    async def get(self, key: str) -> Optional[CachedResponse]:
        return self._cache.get(key)

    async def set(self, key: str, response: CachedResponse) -> None:
        self._cache[key] = response

    async def remove(self, key: str) -> None:
        self._cache.pop(key, None)

    async def clear(self) -> None:
        self._cache.clear()
        logger.info("Cache cleared")

    @property
    def keys(self) -> List[str]:
        return list(self._cache.keys())

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._cache))
