"""
Centralized configuration management for the OAuth gateway core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Validation using Pydantic
"""

import os
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    DriveMimeType,
    EnvironmentVariable,
    GoogleEndpoint,
    Limits,
    LogLevel,
    QueueName,
    Timeouts,
    WORKSPACE_SCOPES,
)


class DatabaseConfig(BaseModel):
    """Credential store database configuration."""

    connection_string: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DATABASE_URL.value) or None,
        description="SQLAlchemy URL; overrides the DB_* variables when set",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    echo: bool = Field(default=False, description="Echo SQL statements")


class OAuthConfig(BaseModel):
    """OAuth client registration and endpoints."""

    client_id: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.GOOGLE_CLIENT_ID.value, ""),
        description="OAuth client ID",
    )
    client_secret: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.GOOGLE_CLIENT_SECRET.value, ""),
        description="OAuth client secret",
    )
    redirect_uri: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.GOOGLE_REDIRECT_URI.value, "http://localhost:3000/oauth/callback"
        ),
        description="Redirect URI registered with the provider",
    )
    login_url: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.OAUTH_LOGIN_URL.value),
        description="Login entry point shown to principals; derived from redirect_uri when unset",
    )
    authorize_url: str = Field(default=GoogleEndpoint.AUTHORIZE.value)
    token_url: str = Field(default=GoogleEndpoint.TOKEN.value)
    scopes: List[str] = Field(default_factory=lambda: list(WORKSPACE_SCOPES))
    http_timeout_seconds: float = Field(default=Timeouts.EXTERNAL_API_CALL, gt=0)


class RetryConfig(BaseModel):
    """Retry behaviour for credential store reads."""

    max_attempts: int = Field(
        default_factory=lambda: int(
            os.getenv(
                EnvironmentVariable.CREDENTIAL_READ_MAX_ATTEMPTS.value,
                str(Limits.MAX_READ_ATTEMPTS),
            )
        ),
        ge=1,
        description="Maximum store read attempts",
    )
    base_delay_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv(
                EnvironmentVariable.CREDENTIAL_READ_BASE_DELAY.value,
                str(Timeouts.CREDENTIAL_READ_BASE_DELAY),
            )
        ),
        ge=0,
        description="Backoff unit; the delay after attempt n is n * base_delay_seconds",
    )


class SearchConfig(BaseModel):
    """Fallback search tuning."""

    default_max_results: int = Field(default=Limits.DEFAULT_MAX_RESULTS, gt=0)
    prefix_min_length: int = Field(default=Limits.PREFIX_MIN_LENGTH, gt=0)
    prefix_ratio: float = Field(default=Limits.PREFIX_RATIO, gt=0, le=1)
    recall_multiplier: int = Field(default=Limits.PREFIX_RECALL_MULTIPLIER, ge=1)
    document_predicate: str = Field(default=f"mimeType = '{DriveMimeType.DOCUMENT.value}'")
    tabular_predicate: str = Field(default=f"mimeType = '{DriveMimeType.SPREADSHEET.value}'")


class QueueConfig(BaseModel):
    """Queue configuration for optional log shipping."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling gateway behaviour."""

    enable_logs_queue: bool = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.ENABLE_LOGS_QUEUE.value, "false"
        ).lower()
        == "true",
        description="Ship structured logs to the logs queue",
    )
    enable_fallback_search: bool = Field(
        default=True, description="Run query relaxations when a literal search finds nothing"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower()
        == "true",
        description="Debug mode",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    oauth: OAuthConfig = Field(default_factory=OAuthConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
