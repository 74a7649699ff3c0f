"""
Log filters: correlation id and static extra fields.

The correlation id lives in a ``ContextVar``: every asyncio task gets a copy
of the context it was created in, so concurrent requests (and background
continuations) each log their own id.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional


_correlation_id: ContextVar[Optional[str]] = ContextVar("http_middleware_correlation_id", default=None)


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation id for the current context.

    Example:
        >>> set_correlation_id("req-12345")
        >>> logger.info("Processing request")  # includes correlation_id
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current context, or None."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_id_scope(correlation_id: str) -> Iterator[None]:
    """
    Bind a correlation id for the duration of a block.

    Example:
        >>> with correlation_id_scope(context.request_id):
        ...     result = await pipeline.execute(context)
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to records when one is bound."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to every record.

    Fields passed explicitly via ``extra`` win over the static ones.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"service": "api", "environment": "prod"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
