"""
Load MiddlewareClientConfig from environment variables and .env files.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..config import MiddlewareClientConfig, TimeoutConfig
from ..exceptions import ConfigurationError
from ..logging.config import LoggingConfig, LogFormat, LogLevel
from ...utils.sanitizer import mask_sensitive_data
from .validator import MiddlewareClientSettings

logger = logging.getLogger(__name__)


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> MiddlewareClientConfig:
    """
    Load MiddlewareClientConfig from environment.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (MiddlewareClientSettings field names)
    2. Environment variables (HTTP_MIDDLEWARE_*)
    3. .env file (``env_file`` or ``.env`` in the working directory)
    4. Defaults

    Raises:
        ConfigurationError: unknown override or invalid value

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(env_file=".env.test", base_url="http://localhost:8080")
    """
    unknown = set(overrides) - set(MiddlewareClientSettings.model_fields)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    kwargs = dict(overrides)
    if env_file is not None:
        kwargs['_env_file'] = env_file

    try:
        settings = MiddlewareClientSettings(**kwargs)
        logging_settings = settings.to_logging_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    timeout = TimeoutConfig(
        connect=settings.timeout_connect,
        read=settings.timeout_read,
        write=settings.timeout_write,
        pool=settings.timeout_pool,
    )

    logging_config = None
    if logging_settings:
        logging_config = LoggingConfig(
            level=LogLevel(logging_settings.level),
            format=LogFormat(logging_settings.format),
            enable_console=logging_settings.enable_console,
            enable_file=logging_settings.enable_file,
            file_path=logging_settings.file_path,
            max_bytes=logging_settings.max_bytes,
            backup_count=logging_settings.backup_count,
            enable_correlation_id=logging_settings.enable_correlation_id,
        )

    config = MiddlewareClientConfig(
        base_url=settings.base_url,
        headers=settings.headers,
        timeout=timeout,
        follow_redirects=settings.follow_redirects,
        logging=logging_config,
    )
    logger.debug("Loaded configuration from environment: %s", config_summary(config))
    return config


def config_summary(config: MiddlewareClientConfig) -> str:
    """
    One-line summary of a config with sensitive headers masked.

    Example:
        >>> config_summary(load_from_env())
        "base_url=https://api.example.com timeout=connect=5.0s read=30.0s ..."
    """
    t = config.timeout
    parts = [
        f"base_url={config.base_url}",
        f"timeout=connect={t.connect}s read={t.read}s write={t.write}s pool={t.pool}s",
        f"follow_redirects={config.follow_redirects}",
        f"headers={mask_sensitive_data(dict(config.headers))}",
    ]
    if config.logging:
        parts.append(f"logging={config.logging.level.value}/{config.logging.format.value}")
    return " ".join(parts)
