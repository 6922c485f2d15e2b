"""Pytest configuration and shared fixtures."""

import os
from typing import Generator

import pytest

# Keep test output quiet
os.environ.setdefault("TASKFLOW_LOG_LEVEL", "ERROR")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: tests that exercise several components together")
    config.addinivalue_line("markers", "slow: tests that take noticeably longer")


@pytest.fixture
def mock_settings() -> Generator:
    """Clear cached settings around a test."""
    from taskflow.core.config import clear_settings_cache

    clear_settings_cache()

    yield

    clear_settings_cache()


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults."""
    from taskflow.orchestration.models import Task

    def _make(task_id: str, hours: float = 8.0, deps: list[str] | None = None, **kwargs) -> Task:
        return Task(
            id=task_id,
            title=kwargs.pop("title", f"Task {task_id}"),
            estimated_hours=hours,
            dependencies=deps or [],
            **kwargs,
        )

    return _make


@pytest.fixture
def diamond_tasks(make_task) -> list:
    """A(4) fans out to B(8) and C(8), which join into D(4)."""
    return [
        make_task("A", 4),
        make_task("B", 8, ["A"]),
        make_task("C", 8, ["A"]),
        make_task("D", 4, ["B", "C"]),
    ]


@pytest.fixture
def web_app_tasks(make_task) -> list:
    """A small but realistic plan with assignees and mixed task types."""
    from taskflow.orchestration.models import TaskType

    return [
        make_task("setup", 4, title="Initialize project", assignee="alice"),
        make_task("models", 8, ["setup"], title="Create data models", assignee="bob"),
        make_task("auth", 12, ["models"], title="Implement authentication", assignee="alice", complexity=8),
        make_task("api", 16, ["models", "setup"], title="Create API endpoints", assignee="bob"),
        make_task("ui", 24, ["setup"], title="Build frontend", assignee="carol"),
        make_task("unit-tests", 6, ["auth", "api"], title="Write unit tests", type=TaskType.TEST),
        make_task("e2e-tests", 6, ["ui"], title="Write end-to-end tests", type=TaskType.TEST),
        make_task(
            "deploy",
            2,
            ["unit-tests", "e2e-tests"],
            title="Deploy to staging",
            type=TaskType.DEPLOYMENT,
        ),
    ]


@pytest.fixture
def cyclic_tasks(make_task) -> list:
    """A three-task cycle hanging off a root task."""
    return [
        make_task("root", 2),
        make_task("x", 3, ["root", "z"]),
        make_task("y", 3, ["x"]),
        make_task("z", 3, ["y"]),
    ]
