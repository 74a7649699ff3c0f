"""Key helpers shared by the cache and dedup middlewares."""

from typing import Callable

import httpx

from ..core.exceptions import InvalidKeyError

# Генератор ключа кэша/дедупликации
KeyGenerator = Callable[[httpx.Request], str]

# Предикат для запроса
RequestPredicate = Callable[[httpx.Request], bool]

# Безопасные (read-only) методы
SAFE_METHODS = frozenset({"GET", "HEAD"})


def default_key(request: httpx.Request) -> str:
    """Ключ по умолчанию: ``METHOD:URL``."""
    return f"{request.method}:{request.url}"


def build_key(generator: KeyGenerator, request: httpx.Request, source: str) -> str:
    """Вызвать генератор и проверить, что ключ - непустая строка."""
    key = generator(request)
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key, source)
    return key
