"""ddconfgen application settings.

Uses pydantic-settings to load configuration from environment variables
and .env files with validation.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from ddconfgen.constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    PROVIDER_ENTRY_POINT_GROUP,
)
from ddconfgen.errors import ConfigValidationError


class Settings(BaseSettings):
    """ddconfgen application settings.

    All settings can be overridden via environment variables
    prefixed with DDCONFGEN_.

    Example:
        DDCONFGEN_LOG_LEVEL=DEBUG
        DDCONFGEN_AWS_PROFILE=monitoring
    """

    # Logging
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Logging level")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, description="Logging format string")

    # AWS
    aws_profile: Optional[str] = Field(
        default=None,
        description="Named AWS profile used for discovery sessions"
    )

    # Providers
    provider_entry_point_group: str = Field(
        default=PROVIDER_ENTRY_POINT_GROUP,
        description="Entry point group scanned for additional providers"
    )

    class Config:
        env_prefix = "DDCONFGEN_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment

    Raises:
        ConfigValidationError: If an environment value is invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigValidationError(
            f"invalid settings: DDCONFGEN_{field.upper()}: {first.get('msg')}",
            field=field,
        ) from e
