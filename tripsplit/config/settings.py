"""
Configuration Management for tripsplit

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The balance engine and ledger take no configuration at all; only the
settlement flow, the validator and logging read these settings.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPSPLIT_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level for local logs"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (False = human-readable console output)"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRIPSPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="Rs.",
        max_length=5,
        description="Currency prefix used in audit descriptions"
    )

    # Validation
    validate_expenses: bool = Field(
        default=True,
        description="Reject expense lists with error-level issues before computing balances"
    )
    payer_sum_tolerance: float = Field(
        default=0.01,
        ge=0.0,
        description="Allowed difference between an expense amount and the sum paid by its payers"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
