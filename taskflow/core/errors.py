"""Exceptions raised by TaskFlow.

Only two classes of problems stop an orchestration run: an invalid
configuration, and an internal invariant violation. Graph defects in the
input (self, dangling or circular dependencies) are repaired and reported as
warnings instead.
"""

from typing import Any


class TaskFlowError(Exception):
    """Base exception for TaskFlow errors."""

    pass


class ConfigurationError(TaskFlowError):
    """Orchestration configuration is invalid."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class InternalInvariantError(TaskFlowError):
    """A guarantee of an earlier stage was broken (a bug, not bad input)."""

    def __init__(self, message: str, snapshot: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.snapshot = snapshot or {}
