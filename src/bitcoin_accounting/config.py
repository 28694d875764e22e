"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bitcoin_accounting.domain.value_objects import Currency, LotSelection, RatePolicy


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with BTCA_) or .env file.

    Examples:
        BTCA_SQLITE_PATH=/var/lib/btca/ledger.db
        BTCA_RATE_POLICY=nearest_prior
        BTCA_LOG_LEVEL=DEBUG
        BTCA_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="BTCA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Bitcoin Accounting"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False, description="Enable debug mode")

    # Storage
    sqlite_path: Path = Field(
        default=Path.home() / ".bitcoin_accounting" / "ledger.db",
        description="SQLite database file holding exchange rates and snapshots",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Accounting
    fiat_currency: Currency = Field(
        default=Currency.USD, description="Fiat currency every price is quoted in"
    )
    rate_policy: RatePolicy = Field(
        default=RatePolicy.EXACT,
        description="Exchange rate lookup policy: exact date only or nearest prior date",
    )
    rate_max_lookback_days: int = Field(
        default=7,
        ge=0,
        le=366,
        description="Maximum age of a prior-date rate under the nearest_prior policy",
    )
    lot_selection: LotSelection = Field(
        default=LotSelection.FIFO,
        description="Policy used when selecting outpoints to cover an amount",
    )

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug_from_environment(cls, v: bool, info) -> bool:
        """Auto-enable debug in development environment."""
        if info.data.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
