"""
Structured logger for http-middleware.

Configures the ``http_middleware`` package logger. Every module logger
(``http_middleware.middlewares.swr_middleware`` etc.) is a child of it, so
the handlers, formatters and filters set up here apply to the whole library.
"""

import logging
from typing import Optional, Any

from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import build_handlers
from ...utils.sanitizer import mask_sensitive_data

LOGGER_NAME = "http_middleware"


class MiddlewareLogger:
    """
    Owns the handlers of the ``http_middleware`` logger.

    Extra fields passed as keyword arguments are masked with
    ``mask_sensitive_data`` before they reach a handler.

    Example:
        >>> logger = MiddlewareLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Request completed", status_code=200, authorization="Bearer x")
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.config.python_level)
        self._logger.propagate = False

        # Reinitialization replaces the previous handlers
        self._remove_handlers()

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        for handler in build_handlers(self.config, filters):
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """Underlying ``logging.Logger``."""
        return self._logger

    @property
    def closed(self) -> bool:
        return self._closed

    def _log(self, level: int, message: str, kwargs: dict, exc_info: bool = False) -> None:
        self._logger.log(level, message, extra=mask_sensitive_data(kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message with extra fields.

        Example:
            >>> logger.info("Request completed", status_code=200, duration_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error with the traceback of the exception being handled."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def _remove_handlers(self) -> None:
        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

    def close(self) -> None:
        """
        Flush and close handlers and give the logger back to the root
        configuration. Idempotent.
        """
        if self._closed:
            return

        self._remove_handlers()
        self._logger.addHandler(logging.NullHandler())
        self._logger.propagate = True
        self._logger.setLevel(logging.NOTSET)
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# Global instance
_default_logger: Optional[MiddlewareLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> MiddlewareLogger:
    """
    Get the global logger, creating it on first call.

    ``config`` is only used when the logger does not exist yet.
    """
    global _default_logger

    if _default_logger is None or _default_logger.closed:
        _default_logger = MiddlewareLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> MiddlewareLogger:
    """
    Replace the global logger with one built from ``config``.

    Example:
        >>> logger = configure_logging(LoggingConfig.create(level="DEBUG", format="colored"))
    """
    global _default_logger

    if _default_logger is not None:
        _default_logger.close()

    _default_logger = MiddlewareLogger(config)
    return _default_logger
