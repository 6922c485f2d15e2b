"""Core module - configuration, logging and exceptions."""

from taskflow.core.config import Settings, clear_settings_cache, get_settings
from taskflow.core.errors import (
    ConfigurationError,
    InternalInvariantError,
    TaskFlowError,
)
from taskflow.core.logging_setup import configure_logging

__all__ = [
    "ConfigurationError",
    "InternalInvariantError",
    "Settings",
    "TaskFlowError",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
