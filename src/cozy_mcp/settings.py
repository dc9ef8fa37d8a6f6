"""Configuration management using pydantic-settings.

Every setting can be overridden with a ``COZY_`` prefixed environment
variable (for example ``COZY_TASK_SERVICE_URL``) or a ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="COZY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend services
    auth_service_url: str = Field(default="http://localhost:8080", description="Auth service base URL")
    task_service_url: str = Field(default="http://localhost:8081", description="Task/project service base URL")
    calendar_service_url: str = Field(default="http://localhost:8082", description="Calendar service base URL")
    event_service_url: str = Field(default="http://localhost:8083", description="Event service base URL")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    # Query cache
    query_stale_time: float = Field(default=60.0, ge=0, description="Seconds before cached data is stale")
    query_gc_time: float = Field(default=300.0, ge=0, description="Seconds an unobserved entry is kept")
    query_retry: int = Field(default=3, ge=0, le=10, description="Retries for failed read queries")
    query_retry_delay: float = Field(default=0.5, ge=0, description="Initial retry delay in seconds")

    # Session
    session_file: str | None = Field(default=None, description="JSON file the session is persisted to")
    email: str | None = Field(default=None, description="Account email for automatic login")
    password: SecretStr | None = Field(default=None, description="Account password for automatic login")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
