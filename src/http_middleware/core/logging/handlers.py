"""Handlers for the ``http_middleware`` logger."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Sequence

from .config import LoggingConfig
from .formatters import get_formatter


def build_handlers(config: LoggingConfig, filters: Sequence[logging.Filter] = ()) -> List[logging.Handler]:
    """
    Handlers described by ``config``: stdout and/or a rotating file.

    Every handler gets the configured level, formatter and ``filters``.
    An empty list means the logger stays silent (console and file disabled).

    File rotation:
        client.log       <- current
        client.log.1     <- previous
        ...
        client.log.N     <- oldest (N = backup_count)
    """
    handlers: List[logging.Handler] = []

    if config.enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if config.enable_file:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=str(path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        ))

    formatter = get_formatter(config.format.value)
    for handler in handlers:
        handler.setLevel(config.python_level)
        handler.setFormatter(formatter)
        for log_filter in filters:
            handler.addFilter(log_filter)

    return handlers
