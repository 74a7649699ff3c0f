# src/http_middleware/middlewares/base.py
"""
Базовый класс для middleware.

Middleware получает контекст запроса и функцию next, которая вызывает
следующий middleware в цепочке (или сетевой запрос, если он последний).
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from ..core.context import MiddlewareContext
from ..core.response import MiddlewareResult

# Следующий middleware (или терминальный вызов) в цепочке
MiddlewareNext = Callable[[MiddlewareContext], Awaitable[MiddlewareResult]]


class HttpMiddleware(ABC):
    """
    Базовый класс для всех middleware.

    Порядок выполнения совпадает с порядком в списке; первый middleware
    оборачивает все остальные:

        Request:  Client -> M1 -> M2 -> M3 -> Network
        Response: Client <- M1 <- M2 <- M3 <- Network

    Правила:
        1. Вызывайте next ровно один раз, либо ни разу, если намеренно
           отвечаете сами (например, из кэша).
        2. Проверяйте context.is_background в кэширующих middleware,
           чтобы не зациклить background ревалидацию.
        3. Обменивайтесь данными с другими middleware через context.metadata.
        4. Ошибки можно пробросить или преобразовать.

    Example:
        >>> class AuthMiddleware(HttpMiddleware):
        ...     def __init__(self, token):
        ...         self.token = token
        ...
        ...     async def process(self, context, next):
        ...         context.request.headers['Authorization'] = f'Bearer {self.token}'
        ...         return await next(context)
    """

    @property
    def name(self) -> str:
        """Имя middleware (для логов и отладки)."""
        return self.__class__.__name__

    @abstractmethod
    async def process(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
    ) -> MiddlewareResult:
        """
        Обработать запрос.

        Args:
            context: Запрос и общие метаданные
            next: Вызывает следующий middleware

        Returns:
            MiddlewareResult, возможно с background continuation
        """

    def on_background_error(self, error: Exception) -> None:
        """
        Вызывается, если background continuation завершилась ошибкой.

        Вызывается у ВСЕХ middleware в цепочке, а не только у того,
        кто запустил continuation. По умолчанию ничего не делает.

        Args:
            error: Исключение (traceback доступен через error.__traceback__)
        """
        return None

    def __repr__(self) -> str:
        return f"{self.name}()"


class FunctionMiddleware(HttpMiddleware):
    """
    Адаптер для middleware в виде обычной async функции.

    Example:
        >>> async def add_header(context, next):
        ...     context.request.headers['X-Client'] = 'http-middleware'
        ...     return await next(context)
        >>>
        >>> client = MiddlewareClient(middlewares=[FunctionMiddleware(add_header)])
    """

    def __init__(
        self,
        func: Callable[[MiddlewareContext, MiddlewareNext], Awaitable[MiddlewareResult]],
        on_background_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._func = func
        self._on_background_error = on_background_error

    @property
    def name(self) -> str:
        return getattr(self._func, "__name__", self.__class__.__name__)

    async def process(self, context: MiddlewareContext, next: MiddlewareNext) -> MiddlewareResult:
        return await self._func(context, next)

    def on_background_error(self, error: Exception) -> None:
        if self._on_background_error is not None:
            self._on_background_error(error)

    def __repr__(self) -> str:
        return f"FunctionMiddleware({self.name})"


def middleware(func):
    """Декоратор: превращает async функцию в HttpMiddleware."""
    return FunctionMiddleware(func)
