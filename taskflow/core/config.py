"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKFLOW_",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for rotating log files (stderr only when unset)",
    )

    # Orchestration defaults
    default_max_parallel_tasks: int = Field(
        default=10,
        ge=1,
        description="Default upper bound on tasks per parallel group",
    )
    default_team_size: int = Field(
        default=3,
        ge=1,
        description="Team size assumed by the workload balancer",
    )
    default_buffer_percentage: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Schedule buffer applied on top of the critical path",
    )
    pruning_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Deadline in seconds for redundant-dependency pruning",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.default_team_size
        3
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
