# src/http_middleware/client.py
"""
Асинхронный HTTP клиент с цепочкой middleware на базе httpx.

Каждый запрос проходит через MiddlewarePipeline. Если middleware вернул
background continuation (например, SWR ревалидацию), клиент запускает её
в фоне через BackgroundRunner и сразу отдаёт ответ вызывающему.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from .core.background import BackgroundRunner
from .core.config import MiddlewareClientConfig, TimeoutLike
from .core.context import MiddlewareContext
from .core.exceptions import classify_httpx_exception
from .core.logging import MiddlewareLogger, configure_logging, correlation_id_scope
from .core.pipeline import MiddlewarePipeline
from .middlewares.base import HttpMiddleware

logger = logging.getLogger(__name__)


class MiddlewareClient:
    """
    HTTP клиент, выполняющий запросы через цепочку middleware.

    Example:
        >>> cache = InMemorySwrCache()
        >>> async with MiddlewareClient(
        ...     [LoggingMiddleware(), DedupMiddleware(), SwrMiddleware(cache=cache)],
        ...     base_url="https://api.example.com",
        ... ) as client:
        ...     response = await client.get("/users")
        ...     print(response.json())

        >>> # Или без context manager
        >>> client = MiddlewareClient([SwrMiddleware(cache=cache)])
        >>> response = await client.get("https://api.example.com/users")
        >>> await client.close()  # дождётся фоновых запросов

    Ответы возвращаются уже прочитанными (как у httpx.AsyncClient.request).
    Для потокового чтения используйте ``send(request, stream=True)``.
    """

    def __init__(
        self,
        middlewares: Optional[Sequence[HttpMiddleware]] = None,
        *,
        base_url: Optional[str] = None,
        config: Optional[MiddlewareClientConfig] = None,
        timeout: TimeoutLike = 30,
        headers: Optional[Dict[str, str]] = None,
        follow_redirects: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Инициализация клиента.

        Args:
            middlewares: Middleware в порядке выполнения
            base_url: Базовый URL для всех запросов
            config: MiddlewareClientConfig (если указан, base_url/timeout/headers/
                follow_redirects игнорируются)
            timeout: Таймаут в секундах, (connect, read) или TimeoutConfig
            headers: Заголовки по умолчанию
            follow_redirects: Следовать редиректам
            client: Готовый httpx.AsyncClient (клиент его не закрывает)
            transport: httpx транспорт для создаваемого клиента (например, MockTransport)
        """
        if config is not None:
            self._config = config
        else:
            self._config = MiddlewareClientConfig.create(
                base_url=base_url,
                timeout=timeout,
                headers=headers,
                follow_redirects=follow_redirects,
            )

        self._structured_logger: Optional[MiddlewareLogger] = None
        if self._config.logging is not None:
            self._structured_logger = configure_logging(self._config.logging)

        # Клиент создаётся лениво, если не передан
        self._client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None
        self._transport_override = transport

        self._pipeline = MiddlewarePipeline(middlewares or [], self._send_over_network)
        self._background = BackgroundRunner(self._pipeline)

        logger.debug("MiddlewareClient initialized with middlewares: %s", self.get_middlewares_order())

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            client_kwargs: Dict[str, Any] = {
                "base_url": self._config.base_url or "",
                "timeout": self._config.timeout.to_httpx(),
                "headers": dict(self._config.headers),
                "follow_redirects": self._config.follow_redirects,
            }
            if self._transport_override is not None:
                client_kwargs["transport"] = self._transport_override

            self._client = httpx.AsyncClient(**client_kwargs)
        return self._client

    async def __aenter__(self) -> "MiddlewareClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Дождаться фоновых запросов и освободить ресурсы.

        После закрытия новые background continuations не запускаются.
        """
        await self._background.aclose()

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

        if self._structured_logger is not None:
            self._structured_logger.close()
            self._structured_logger = None

    async def wait_for_background(self) -> None:
        """Дождаться завершения всех запущенных фоновых запросов."""
        await self._background.wait_idle()

    # ==================== Транспорт ====================

    async def _send_over_network(self, request: httpx.Request) -> httpx.Response:
        """Терминальный вызов цепочки: отправить запрос через httpx."""
        client = self._get_client()
        try:
            return await client.send(request, stream=True)
        except httpx.TransportError as e:
            raise classify_httpx_exception(e, url=str(request.url)) from e

    # ==================== HTTP методы ====================

    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        """
        Выполнить готовый запрос через цепочку middleware.

        Args:
            request: httpx.Request (например, из build_request)
            stream: Вернуть ответ без чтения тела (вызывающий должен
                закрыть его через ``aclose()``)

        Returns:
            httpx.Response

        Raises:
            TimeoutError: Таймаут запроса
            ConnectionError: Ошибка соединения
            TransportError: Другие ошибки транспорта
        """
        context = MiddlewareContext(request)

        with correlation_id_scope(context.request_id):
            result = await self._pipeline.execute(context)

            # Запускаем внутри scope: задача унаследует correlation id
            if result.has_background_continuation:
                self._background.schedule(result.background_context)

        response = result.response
        if not stream:
            try:
                await response.aread()
            except httpx.TransportError as e:
                raise classify_httpx_exception(e, url=str(request.url)) from e
        return response

    def build_request(self, method: str, url: str, **kwargs: Any) -> httpx.Request:
        """Собрать httpx.Request с учётом base_url и заголовков по умолчанию."""
        return self._get_client().build_request(method, url, **kwargs)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Выполнить HTTP запрос.

        Args:
            method: HTTP метод (GET, POST, etc.)
            url: URL (относительный или абсолютный)
            **kwargs: Параметры httpx.AsyncClient.build_request (params, json, headers, ...)
        """
        return await self.send(self.build_request(method, url, **kwargs))

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def head(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("OPTIONS", url, **kwargs)

    # ==================== Middleware ====================

    def get_middlewares_order(self) -> List[str]:
        """
        Имена middleware в порядке выполнения (для отладки).

        Example:
            >>> client = MiddlewareClient([LoggingMiddleware(), DedupMiddleware()])
            >>> client.get_middlewares_order()
            ['LoggingMiddleware', 'DedupMiddleware']
        """
        return [m.name for m in self._pipeline.middlewares]

    # ==================== Properties ====================

    @property
    def middlewares(self) -> Sequence[HttpMiddleware]:
        return self._pipeline.middlewares

    @property
    def config(self) -> MiddlewareClientConfig:
        return self._config

    @property
    def base_url(self) -> Optional[str]:
        """Базовый URL."""
        return self._config.base_url

    @property
    def headers(self) -> Mapping[str, str]:
        return self._config.headers

    @property
    def pending_background(self) -> int:
        """Количество выполняющихся фоновых запросов."""
        return self._background.pending
