"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ZEROKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tenant
    service_url: str = Field(
        default="https://localhost",
        description="Tenant service URL (e.g. https://exampletenant.tresorit.io)",
    )
    admin_user_id: str = Field(
        default="",
        description="Tenant admin user identifier",
    )
    admin_key: str = Field(
        default="",
        repr=False,
        description="Hex-encoded tenant admin key",
    )
    api_base_path: str = Field(
        default="/api/v4/admin",
        description="Path prefix of the admin API",
    )

    # Transport
    http_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached client settings."""
    return Settings()
