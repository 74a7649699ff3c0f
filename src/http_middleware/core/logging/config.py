"""Logging configuration."""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration of the ``http_middleware`` logger.

    Attributes:
        level: Threshold for the package logger and its handlers
        format: json, text or colored
        enable_console: Write records to stdout
        enable_file: Write records to a rotating file at ``file_path``
        max_bytes / backup_count: Rotation of the log file
        enable_correlation_id: Stamp records with the id of the request being processed
        extra_fields: Static fields added to every record (service name, environment, ...)

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> quiet = config.with_level("WARNING")
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = 5
    enable_correlation_id: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @property
    def python_level(self) -> int:
        """Level as a ``logging`` constant."""
        return logging.getLevelName(self.level.value)

    def with_level(self, level: Union[str, LogLevel]) -> "LoggingConfig":
        return replace(self, level=LogLevel(str(getattr(level, "value", level)).upper()))

    @classmethod
    def create(
        cls,
        level: Union[str, LogLevel] = "INFO",
        format: Union[str, LogFormat] = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = 5,
        enable_correlation_id: bool = True,
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> "LoggingConfig":
        """
        Build a config from plain strings (case-insensitive) or enum members.

        Raises:
            ValueError: unknown level or format
        """
        level_name = str(getattr(level, "value", level)).upper()
        format_name = str(getattr(format, "value", format)).lower()
        return cls(
            level=LogLevel(level_name),
            format=LogFormat(format_name),
            enable_console=enable_console,
            enable_file=enable_file,
            file_path=file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            enable_correlation_id=enable_correlation_id,
            extra_fields=dict(extra_fields or {}),
        )
