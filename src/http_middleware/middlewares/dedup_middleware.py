# src/http_middleware/middlewares/dedup_middleware.py
"""
Middleware для дедупликации одновременных одинаковых запросов.

Если несколько одинаковых запросов выполняются одновременно, в сеть
уходит только один, а все вызывающие получают копию его ответа.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..core.cached_response import CachedResponse
from ..core.context import DEDUP_KEY, DEDUP_SHARED, MiddlewareContext
from ..core.response import MiddlewareResult
from .base import HttpMiddleware, MiddlewareNext
from .keys import SAFE_METHODS, KeyGenerator, RequestPredicate, build_key, default_key

logger = logging.getLogger(__name__)


def default_should_dedup(request: httpx.Request) -> bool:
    """Дедуплицируем только безопасные методы (GET, HEAD)."""
    return request.method in SAFE_METHODS


def _consume_exception(future: "asyncio.Future[CachedResponse]") -> None:
    # Ошибка, которую никто не ждал, не должна попасть в лог asyncio
    # как "Future exception was never retrieved"
    if not future.cancelled():
        future.exception()


class _InFlightRequest:
    """Запрос, который сейчас выполняется (общий результат для всех ожидающих)."""

    __slots__ = ("future", "waiters")

    def __init__(self):
        self.future: "asyncio.Future[CachedResponse]" = asyncio.get_running_loop().create_future()
        self.future.add_done_callback(_consume_exception)
        self.waiters = 0


class DedupMiddleware(HttpMiddleware):
    """
    Объединяет одновременные одинаковые запросы в один.

    Как работает:
        1. Для запроса вычисляется ключ (по умолчанию METHOD:URL).
        2. Если такой запрос уже выполняется - ждём его и возвращаем
           копию его ответа (или ту же ошибку).
        3. Иначе регистрируем запрос и выполняем его; результат
           получают все, кто успел подключиться.

    Выполняет запрос тот, кто первым зарегистрировался, а не тот, кто
    первым закончил. Background запросы не дедуплицируются - они всегда
    доходят до сети.

    Метаданные:
        dedup:key     - вычисленный ключ
        dedup:shared  - True, если ответ получен от чужого запроса

    Example:
        >>> client = MiddlewareClient(middlewares=[DedupMiddleware(), SwrMiddleware(cache)])
        >>> # В сеть уйдёт один запрос
        >>> responses = await asyncio.gather(
        ...     client.get("https://api.example.com/data"),
        ...     client.get("https://api.example.com/data"),
        ...     client.get("https://api.example.com/data"),
        ... )
    """

    def __init__(
        self,
        key_generator: Optional[KeyGenerator] = None,
        should_dedup: Optional[RequestPredicate] = None,
    ):
        """
        Args:
            key_generator: Генератор ключа (по умолчанию METHOD:URL)
            should_dedup: Дедуплицировать ли запрос (по умолчанию GET и HEAD)
        """
        self.key_generator = key_generator or default_key
        self.should_dedup = should_dedup or default_should_dedup

        self._in_flight: Dict[str, _InFlightRequest] = {}
        self._lock = asyncio.Lock()  # Защищает check-and-register и удаление

        self._executed = 0
        self._shared = 0

    async def _register(self, key: str) -> Tuple[_InFlightRequest, bool]:
        """
        Атомарно найти или зарегистрировать запрос.

        Returns:
            (запись, True) если мы владелец и должны выполнить запрос,
            (запись, False) если запрос уже выполняется
        """
        async with self._lock:
            existing = self._in_flight.get(key)
            if existing is not None:
                existing.waiters += 1
                return existing, False

            entry = _InFlightRequest()
            self._in_flight[key] = entry
            return entry, True

    async def _release(self, key: str, entry: _InFlightRequest) -> None:
        async with self._lock:
            if self._in_flight.get(key) is entry:
                del self._in_flight[key]

    async def process(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
    ) -> MiddlewareResult:
        # Background запросы всегда идут в сеть
        if context.is_background:
            return await next(context)

        if not self.should_dedup(context.request):
            return await next(context)

        key = build_key(self.key_generator, context.request, self.name)
        context.set(DEDUP_KEY, key)

        entry, is_owner = await self._register(key)

        if not is_owner:
            context.set(DEDUP_SHARED, True)
            self._shared += 1
            logger.debug(f"Sharing in-flight request for {key}")

            # shield: отмена одного ожидающего не отменяет общий результат
            cached = await asyncio.shield(entry.future)
            return MiddlewareResult.immediate(cached.to_response())

        self._executed += 1

        try:
            result = await next(context)
            cached = await CachedResponse.from_response(result.response)
        except asyncio.CancelledError:
            entry.future.cancel()
            raise
        except Exception as e:
            # Та же ошибка для всех ожидающих
            entry.future.set_exception(e)
            if entry.waiters:
                logger.debug(f"In-flight request for {key} failed, notifying {entry.waiters} waiter(s)")
            raise
        else:
            entry.future.set_result(cached)
        finally:
            await self._release(key, entry)

        # Сохраняем background continuation нижележащих middleware
        if result.has_background_continuation:
            return MiddlewareResult.with_continuation(
                cached.to_response(),
                result.background_context,
            )

        return MiddlewareResult.immediate(cached.to_response())

    @property
    def in_flight_count(self) -> int:
        """Количество выполняющихся запросов."""
        return len(self._in_flight)

    @property
    def in_flight_keys(self) -> List[str]:
        """Ключи выполняющихся запросов."""
        return list(self._in_flight.keys())

    def get_stats(self) -> Dict[str, Any]:
        """
        Получить статистику.

        Returns:
            Dict с executed (реальные запросы), shared (объединённые), in_flight
        """
        return {
            "executed": self._executed,
            "shared": self._shared,
            "in_flight": len(self._in_flight),
        }
