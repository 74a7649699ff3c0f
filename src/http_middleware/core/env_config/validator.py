"""
Pydantic models for environment configuration.
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    """Logging configuration from environment."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    format: Literal["json", "text", "colored"] = Field(default="text")
    enable_console: bool = Field(default=True)
    enable_file: bool = Field(default=False)
    file_path: Optional[str] = None
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="10MB")
    backup_count: int = Field(default=5, ge=0)
    enable_correlation_id: bool = Field(default=True)

    @model_validator(mode='after')
    def validate_file_path(self) -> 'LoggingSettings':
        """file_path is required when enable_file=True."""
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        return self


class MiddlewareClientSettings(BaseSettings):
    """
    MiddlewareClient configuration from environment variables.

    Reads from (highest priority first):
    1. Init arguments
    2. Environment variables (HTTP_MIDDLEWARE_*)
    3. .env file
    4. Defaults

    Example .env file:
        HTTP_MIDDLEWARE_BASE_URL=https://api.example.com
        HTTP_MIDDLEWARE_HEADERS={"Accept": "application/json"}
        HTTP_MIDDLEWARE_TIMEOUT_CONNECT=5.0
        HTTP_MIDDLEWARE_TIMEOUT_READ=10.0
        HTTP_MIDDLEWARE_LOG_ENABLED=true
        HTTP_MIDDLEWARE_LOG_LEVEL=DEBUG
        HTTP_MIDDLEWARE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTP_MIDDLEWARE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: Optional[str] = Field(default=None, description="Base URL for all requests")
    headers: Dict[str, str] = Field(default_factory=dict, description="Default headers (JSON object)")
    follow_redirects: bool = Field(default=False)

    # Timeouts (flat structure for env vars)
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    timeout_write: float = Field(default=30.0, gt=0)
    timeout_pool: float = Field(default=5.0, gt=0)

    # Logging (configures the structured logger only when enabled)
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Empty string means "no base URL"."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_format', mode='before')
    @classmethod
    def normalize_log_format(cls, v):
        return v.lower() if isinstance(v, str) else v

    def to_logging_settings(self) -> Optional[LoggingSettings]:
        """Convert to LoggingSettings if logging is enabled."""
        if not self.log_enabled:
            return None

        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            enable_console=self.log_enable_console,
            enable_file=self.log_enable_file,
            file_path=self.log_file_path,
            max_bytes=self.log_max_bytes,
            backup_count=self.log_backup_count,
            enable_correlation_id=self.log_enable_correlation_id,
        )
