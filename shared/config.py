"""
Shared configuration management for the New Relic external metrics adapter.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.logging import get_logger

DEFAULT_NEWRELIC_API_URL = "https://api.newrelic.com/v2/"

logger = get_logger("shared.config")


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("ADAPTER_ENV", "env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("ADAPTER_LOG_LEVEL", "log_level"))
    startup_message: str = Field(
        default="starting adapter...",
        validation_alias=AliasChoices("ADAPTER_STARTUP_MESSAGE", "startup_message"),
    )

    # New Relic
    newrelic_api_key: str = Field(validation_alias=AliasChoices("NEWRELIC_API_KEY", "newrelic_api_key"))
    newrelic_api_url: str = Field(
        default=DEFAULT_NEWRELIC_API_URL,
        validation_alias=AliasChoices("NEWRELIC_API_URL", "newrelic_api_url"),
    )
    newrelic_timeout_seconds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("NEWRELIC_TIMEOUT_SECONDS", "newrelic_timeout_seconds"),
    )

    # Aggregation
    min_rpm: int = Field(default=0, validation_alias=AliasChoices("MIN_RPM", "min_rpm"))

    @field_validator("newrelic_api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("NEWRELIC_API_KEY env var must be set")
        return value

    @field_validator("min_rpm", mode="before")
    @classmethod
    def _parse_min_rpm(cls, value):
        if value is None or value == "":
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Could not parse MIN_RPM to int, defaulting to 0", value=value)
            return 0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("ADAPTER_HOST", "host"))

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
