# src/http_middleware/middlewares/swr_middleware.py
"""
Middleware для кэширования по схеме Stale-While-Revalidate (SWR).

Отдаёт закэшированный ответ сразу (stale), а свежие данные
загружает в фоне (revalidate) и обновляет ими кэш.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from ..cache.base import SwrCache
from ..core.cached_response import CachedResponse
from ..core.context import IS_FROM_CACHE, SWR_CACHE_KEY, SWR_REVALIDATING, MiddlewareContext
from ..core.exceptions import RequestCloneError
from ..core.response import MiddlewareResult
from .base import HttpMiddleware, MiddlewareNext
from .keys import KeyGenerator, RequestPredicate, build_key, default_key

logger = logging.getLogger(__name__)

# Предикат для ответа
ResponsePredicate = Callable[[httpx.Response], bool]


def default_should_cache_request(request: httpx.Request) -> bool:
    """Кэшируем только GET запросы."""
    return request.method == "GET"


def default_should_cache_response(response: httpx.Response) -> bool:
    """Кэшируем только успешные ответы (200-299)."""
    return 200 <= response.status_code < 300


class SwrMiddleware(HttpMiddleware):
    """
    Stale-While-Revalidate кэш.

    Как работает:
        1. Запрос не подходит для кэша - просто передаём дальше.
        2. Есть запись в кэше - сразу возвращаем её и запускаем
           background запрос, который обновит кэш.
        3. Записи нет - идём в сеть, кэшируем ответ, возвращаем его копию.

    Параллельные промахи по одному ключу НЕ объединяются - каждый идёт
    в сеть сам. Для этого поставьте DedupMiddleware перед SwrMiddleware.

    Метаданные:
        swr:cacheKey      - вычисленный ключ кэша
        swr:revalidating  - True у background контекста, созданного этим middleware

    Example:
        >>> cache = InMemorySwrCache()
        >>> client = MiddlewareClient(middlewares=[SwrMiddleware(cache=cache)])
        >>> # Первый запрос - miss, идёт в сеть
        >>> response = await client.get("https://api.example.com/data")
        >>> # Второй запрос - hit, мгновенно из кэша + фоновое обновление
        >>> response = await client.get("https://api.example.com/data")
    """

    def __init__(
        self,
        cache: SwrCache,
        cache_key_generator: Optional[KeyGenerator] = None,
        should_cache_request: Optional[RequestPredicate] = None,
        should_cache_response: Optional[ResponsePredicate] = None,
    ):
        """
        Args:
            cache: Хранилище кэша
            cache_key_generator: Генератор ключа (по умолчанию METHOD:URL)
            should_cache_request: Можно ли кэшировать запрос (по умолчанию только GET)
            should_cache_response: Можно ли кэшировать ответ (по умолчанию 2xx)
        """
        self.cache = cache
        self.cache_key_generator = cache_key_generator or default_key
        self.should_cache_request = should_cache_request or default_should_cache_request
        self.should_cache_response = should_cache_response or default_should_cache_response

        self._hits = 0
        self._misses = 0
        self._revalidations = 0

    async def process(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
    ) -> MiddlewareResult:
        request = context.request

        if not self.should_cache_request(request):
            return await next(context)

        cache_key = build_key(self.cache_key_generator, request, self.name)

        # Ключ доступен другим middleware (например, для cache tags)
        context.set(SWR_CACHE_KEY, cache_key)

        if context.is_background:
            if context.get(SWR_REVALIDATING):
                self._revalidations += 1
            # Любой background контекст (наш или чужой) идёт в сеть:
            # из кэша не отдаём и новую continuation не создаём
            return await self._fetch_and_store(context, next, cache_key)

        cached = await self.cache.get(cache_key)

        if cached is not None:
            self._hits += 1
            logger.debug(f"Cache HIT for {request.method} {request.url}")
            context.mark_as_from_cache()

            try:
                background_context = context.copy_for_background()
            except RequestCloneError as e:
                # Отдаём кэш, но без ревалидации
                logger.warning(f"Skipping revalidation for {cache_key}: {e}")
                return MiddlewareResult.immediate(cached.to_response())

            background_context.metadata.pop(IS_FROM_CACHE.name, None)
            background_context.set(SWR_REVALIDATING, True)

            return MiddlewareResult.with_continuation(
                cached.to_response(),
                background_context,
            )

        self._misses += 1
        logger.debug(f"Cache MISS for {request.method} {request.url}")
        return await self._fetch_and_store(context, next, cache_key)

    async def _fetch_and_store(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
        cache_key: str,
    ) -> MiddlewareResult:
        """Сходить в сеть и сохранить ответ, если он подходит для кэша."""
        result = await next(context)

        if not self.should_cache_response(result.response):
            return result

        cached = await CachedResponse.from_response(result.response)
        await self.cache.set(cache_key, cached)
        logger.debug(f"Cached response for {cache_key}")

        # Оригинальный поток уже прочитан - возвращаем копию
        return MiddlewareResult.immediate(cached.to_response())

    def on_background_error(self, error: Exception) -> None:
        # Устаревшая запись остаётся в кэше и будет отдана снова
        logger.debug(f"Background revalidation failed: {error}")

    def get_stats(self) -> Dict[str, Any]:
        """
        Получить статистику кэша.

        Returns:
            Dict с hits, misses, hit_rate, revalidations
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "revalidations": self._revalidations,
        }
