"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

import re

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = (
    "TRACE",
    "DEBUG",
    "INFO",
    "SUCCESS",
    "WARNING",
    "ERROR",
    "CRITICAL",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = "logs/partnerconnector.log"
    log_rotation: str = "1 day"
    log_retention: str = "14 days"

    # Payments
    default_currency: str = Field(
        default="GBP",
        description="Currency stamped on new commission payments",
    )
    transfer_reference_prefix: str = Field(
        default="PAY",
        min_length=1,
        max_length=10,
        description="Prefix for generated bank transfer references",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production' and self.debug:
            raise ValueError(
                'DEBUG must be False in production environment. '
                'Set DEBUG=false in your .env file.'
            )
        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate loguru log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f'LOG_LEVEL must be one of: {", ".join(LOG_LEVELS)}'
            )
        return level

    @field_validator('default_currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate ISO 4217 style currency code."""
        code = v.strip().upper()
        if not re.match(r'^[A-Z]{3}$', code):
            raise ValueError('DEFAULT_CURRENCY must be a 3-letter code')
        return code


# Global settings instance
settings = Settings()
