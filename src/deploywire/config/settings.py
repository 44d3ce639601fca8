"""
Application settings using Pydantic.

Provides environment-based configuration loading with DEPLOYWIRE_ prefix.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings

from deploywire.catalog.identity import DEFAULT_DEPLOYER, normalize_location


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    environment: str = "debug"
    deployments_file: str = "deployments.yaml"
    autosave: bool = True

    # Identity
    deployer: str = DEFAULT_DEPLOYER

    # Backend (in-memory when no URL is configured)
    backend_url: str | None = None
    backend_token: str | None = None
    http_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    @field_validator("deployer")
    @classmethod
    def _check_deployer(cls, value: str) -> str:
        return normalize_location(value)

    @field_validator("environment")
    @classmethod
    def _check_environment(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("environment must not be empty")
        return value.strip().lower()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "DEPLOYWIRE_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
