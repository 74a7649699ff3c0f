"""
Environment configuration for MiddlewareClient.

Load configuration from .env files and ``HTTP_MIDDLEWARE_*`` variables.

Example:
    >>> from http_middleware.core.env_config import load_from_env
    >>>
    >>> config = load_from_env()
    >>> config = load_from_env(env_file=".env.production", timeout_read=60)
"""

from .loader import load_from_env, config_summary
from .validator import MiddlewareClientSettings, LoggingSettings

__all__ = [
    "load_from_env",
    "config_summary",
    "MiddlewareClientSettings",
    "LoggingSettings",
]
