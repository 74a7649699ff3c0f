# src/http_middleware/middlewares/logging_middleware.py

import logging
import time
from typing import Callable, Mapping, Optional

from ..core.context import MiddlewareContext
from ..core.response import MiddlewareResult
from ..utils.sanitizer import mask_sensitive_data
from .base import HttpMiddleware, MiddlewareNext

logger = logging.getLogger(__name__)

# Callback для своего вывода логов
LogCallback = Callable[[str], None]


class LoggingMiddleware(HttpMiddleware):
    """
    Middleware для логирования HTTP запросов и ответов.

    Формат:
        --> GET https://api.example.com/data
        <-- 200 OK (123ms)

    Background запросы помечаются префиксом [BG], ответы из кэша - [CACHE]:
        [BG] --> GET https://api.example.com/data
        <-- 200 OK [CACHE] (2ms)

    Чувствительные заголовки (Authorization, Cookie, ...) маскируются.

    Example:
        >>> client = MiddlewareClient(middlewares=[
        ...     LoggingMiddleware(include_headers=True),
        ...     SwrMiddleware(cache=cache),
        ... ])
    """

    def __init__(
        self,
        log: Optional[LogCallback] = None,
        include_headers: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            log: Callback для вывода (по умолчанию - logger.info)
            include_headers: Логировать заголовки запроса и ответа
            logger: Логгер (по умолчанию - логгер модуля)
        """
        self._log_callback = log
        self._logger = logger or globals()["logger"]
        self.include_headers = include_headers

    def _log(self, message: str) -> None:
        if self._log_callback is not None:
            self._log_callback(message)
        else:
            self._logger.info(message)

    def _log_headers(self, prefix: str, headers: Mapping[str, str]) -> None:
        masked = mask_sensitive_data(dict(headers))
        for name, value in masked.items():
            self._log(f"{prefix}    {name}: {value}")

    async def process(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
    ) -> MiddlewareResult:
        request = context.request
        prefix = "[BG] " if context.is_background else ""

        self._log(f"{prefix}--> {request.method} {request.url}")
        if self.include_headers and request.headers:
            self._log_headers(prefix, request.headers)

        start = time.monotonic()

        try:
            result = await next(context)
        except Exception as error:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            self._log(f"{prefix}<-- ERROR: {error} ({elapsed_ms}ms)")
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        response = result.response
        cache_info = " [CACHE]" if context.is_from_cache else ""

        self._log(
            f"{prefix}<-- {response.status_code} {response.reason_phrase}"
            f"{cache_info} ({elapsed_ms}ms)"
        )
        if self.include_headers and response.headers:
            self._log_headers(prefix, response.headers)

        return result

    def on_background_error(self, error: Exception) -> None:
        self._log(f"[BG] Background request failed: {error}")
