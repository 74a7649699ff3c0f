"""
Иерархия исключений HTTP Middleware.

Классификация:
- TransportError (retryable=True) - ошибка сети/транспорта, можно повторить
- FatalError (fatal=True) - ошибка конфигурации цепочки, повтор бессмысленен
"""

from typing import Optional

import httpx

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPMiddlewareException(Exception):
    """Базовое исключение HTTP Middleware."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ ТРАНСПОРТА (retryable=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(HTTPMiddlewareException):
    """
    Ошибка терминального вызова (сеть, протокол).

    В foreground запросе пробрасывается вызывающему коду через всю цепочку.
    В background запросе доставляется в on_background_error каждого middleware.
    """
    retryable = True

class NetworkError(TransportError):
    """Сетевая ошибка."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class TimeoutError(NetworkError):
    """
    Таймаут запроса.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect', 'read', 'write', 'pool')
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_type: Optional[str] = None
    ):
        self.timeout_type = timeout_type

        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout)"

        super().__init__(msg, url)

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ФАТАЛЬНЫЕ ОШИБКИ (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FatalError(HTTPMiddlewareException):
    """Фатальная ошибка - НЕ ретраить."""
    fatal = True

class RequestCloneError(FatalError):
    """
    Запрос нельзя склонировать для повторной отправки.

    Возникает в copy_for_background() для запросов с одноразовым
    потоковым телом. Прерывает только одну background попытку,
    foreground ответ не затрагивается.

    Args:
        message: Сообщение
        method: HTTP метод запроса
        url: URL запроса
    """

    def __init__(self, message: str, method: Optional[str] = None, url: Optional[str] = None):
        self.method = method
        self.url = url

        msg = message
        if method and url:
            msg += f" ({method} {url})"

        super().__init__(msg)

class MiddlewareChainError(FatalError):
    """
    Нарушен контракт цепочки.

    Пример: middleware вызвал next() больше одного раза.
    """

    def __init__(self, message: str, middleware: Optional[str] = None):
        self.middleware = middleware
        msg = message
        if middleware:
            msg += f" (middleware: {middleware})"
        super().__init__(msg)

class InvalidKeyError(FatalError):
    """
    Генератор ключа вернул некорректное значение.

    Args:
        key: Полученное значение
        source: Кто сгенерировал ключ (например 'SwrMiddleware')
    """

    def __init__(self, key: object, source: Optional[str] = None):
        self.key = key
        self.source = source

        msg = f"Invalid cache/dedup key: {key!r}"
        if source:
            msg += f" (from {source})"

        super().__init__(msg)

class ConfigurationError(HTTPMiddlewareException):
    """Ошибка конфигурации."""
    fatal = True

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify_httpx_exception(
    exc: Exception,
    url: Optional[str] = None
) -> HTTPMiddlewareException:
    """
    Конвертировать httpx исключения в наши.

    Args:
        exc: Исключение из httpx
        url: URL запроса

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = httpx.ReadTimeout("timed out")
        >>> our_exc = classify_httpx_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
        >>> assert our_exc.retryable == True
    """

    if isinstance(exc, httpx.TimeoutException):
        timeout_type = None
        if isinstance(exc, httpx.ConnectTimeout):
            timeout_type = "connect"
        elif isinstance(exc, httpx.ReadTimeout):
            timeout_type = "read"
        elif isinstance(exc, httpx.WriteTimeout):
            timeout_type = "write"
        elif isinstance(exc, httpx.PoolTimeout):
            timeout_type = "pool"
        return TimeoutError(str(exc) or "Request timeout", url, timeout_type)

    elif isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        return ConnectionError(str(exc) or "Connection error", url)

    elif isinstance(exc, httpx.TransportError):
        return TransportError(str(exc) or exc.__class__.__name__)

    else:
        # Неизвестная ошибка - оборачиваем
        return HTTPMiddlewareException(str(exc))
