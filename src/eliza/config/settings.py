"""
Application settings using Pydantic.

This module provides runtime configuration with environment variable support.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eliza.config.constants import (
    DEFAULT_MEMORY_CAPACITY,
    DEFAULT_SESSION_TTL,
    MAX_MEMORY_CAPACITY,
)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings can be overridden via environment variables prefixed with ELIZA_
    For example: ELIZA_MEMORY_CAPACITY=4
    """

    model_config = SettingsConfigDict(
        env_prefix="ELIZA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow other env vars without error
    )

    # Rule Database
    rules_path: Optional[Path] = Field(
        default=None,
        description="JSON rule file (bundled doctor script when unset)",
    )

    # Memory
    memory_capacity: int = Field(
        default=DEFAULT_MEMORY_CAPACITY,
        description="Deferred replies kept per conversation",
        ge=1,
        le=MAX_MEMORY_CAPACITY,
    )

    # Sessions
    session_ttl: int = Field(
        default=DEFAULT_SESSION_TTL,
        description="Idle seconds before a conversation expires",
        ge=1,
    )

    # Runtime
    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )


# Global settings instance (can be overridden for testing)
settings = Settings()
