"""
Structured logging for the ``http_middleware`` package logger.

Module loggers (``http_middleware.client``, ``http_middleware.middlewares.*``)
are children of the package logger, so one ``configure_logging`` call sets
handlers, format and correlation ids for the whole library. While
MiddlewareClient runs a request, the correlation id is that request's id,
in background revalidations too.

Example:
    >>> from http_middleware.core.logging import configure_logging, LoggingConfig
    >>>
    >>> logger = configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    >>> logger.info("Client started", base_url="https://api.example.com")
"""

from .config import LogFormat, LoggingConfig, LogLevel
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    clear_correlation_id,
    correlation_id_scope,
    get_correlation_id,
    set_correlation_id,
)
from .formatters import ColoredFormatter, JSONFormatter, TextFormatter, get_formatter
from .handlers import build_handlers
from .logger import LOGGER_NAME, MiddlewareLogger, configure_logging, get_logger

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    "MiddlewareLogger",
    "get_logger",
    "configure_logging",
    "LOGGER_NAME",
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    "build_handlers",
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_scope",
]
