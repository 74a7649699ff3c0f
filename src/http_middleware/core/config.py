"""
Конфигурация MiddlewareClient.

Все конфиги immutable (frozen dataclasses).
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple, Union

import httpx

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

TimeoutLike = Union[float, Tuple[float, float], "TimeoutConfig"]


@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта (httpx).

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        write: Таймаут отправки данных (сек)
        pool: Ожидание свободного соединения в пуле (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig.from_value((3, 60))
    """
    connect: float = 5.0
    read: float = 30.0
    write: float = 30.0
    pool: float = 5.0

    def __post_init__(self):
        """Валидация."""
        for name in ("connect", "read", "write", "pool"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} timeout must be positive", field=name)

    @classmethod
    def from_value(cls, value: TimeoutLike) -> 'TimeoutConfig':
        """
        Построить из числа (read/write), пары (connect, read) или TimeoutConfig.
        """
        if isinstance(value, TimeoutConfig):
            return value
        if isinstance(value, tuple):
            connect, read = value
            return cls(connect=connect, read=read)
        return cls(read=value, write=value)

    def to_httpx(self) -> httpx.Timeout:
        """Вернуть как httpx.Timeout."""
        return httpx.Timeout(
            connect=self.connect,
            read=self.read,
            write=self.write,
            pool=self.pool,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_dict(d: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    """Скопировать в неизменяемый MappingProxyType."""
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class MiddlewareClientConfig:
    """
    Главная конфигурация MiddlewareClient.

    Args:
        base_url: Базовый URL (опционально)
        headers: Дефолтные заголовки
        timeout: Конфигурация таймаутов
        follow_redirects: Следовать редиректам
        logging: Конфигурация структурного логгера (None = не настраивать)

    Examples:
        >>> config = MiddlewareClientConfig(base_url="https://api.example.com")
        >>> config = MiddlewareClientConfig.create(timeout=60, headers={"Accept": "application/json"})
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    follow_redirects: bool = False
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Заморозить заголовки и нормализовать base_url."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        if self.base_url:
            if not self.base_url.startswith(("http://", "https://")):
                raise ConfigurationError(
                    f"base_url must start with http:// or https://, got {self.base_url!r}",
                    field="base_url",
                )
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        timeout: TimeoutLike = 30,
        connect_timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        follow_redirects: bool = False,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'MiddlewareClientConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            base_url: Базовый URL
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            connect_timeout: Таймаут подключения (переопределяет timeout)
            headers: Заголовки
            follow_redirects: Следовать редиректам
            logging: Конфигурация логирования

        Examples:
            >>> config = MiddlewareClientConfig.create(timeout=60)
            >>> config = MiddlewareClientConfig.create(timeout=(5, 60))
        """
        timeout_cfg = TimeoutConfig.from_value(timeout)
        if connect_timeout is not None:
            timeout_cfg = replace(timeout_cfg, connect=connect_timeout)

        return cls(
            base_url=base_url,
            headers=headers or {},
            timeout=timeout_cfg,
            follow_redirects=follow_redirects,
            logging=logging,
        )

    def with_timeout(self, timeout: TimeoutLike) -> 'MiddlewareClientConfig':
        """
        Создать новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(60)
        """
        return replace(self, timeout=TimeoutConfig.from_value(timeout))

    def with_headers(self, headers: Mapping[str, str]) -> 'MiddlewareClientConfig':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)
