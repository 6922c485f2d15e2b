"""Unit tests for strategy-driven execution order."""

import pytest

from taskflow.orchestration.critical_path import CriticalPathAnalyzer
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import SchedulingStrategy, TaskPriority
from taskflow.orchestration.scheduling import execution_order
from taskflow.orchestration.validator import DependencyValidator


@pytest.fixture
def slack_graph(make_task) -> TaskGraph:
    """Diamond with a short branch plus an independent task."""
    return TaskGraph.from_tasks(
        [
            make_task("A", 4),
            make_task("B", 8, ["A"]),
            make_task("C", 2, ["A"]),
            make_task("D", 4, ["B", "C"]),
            make_task("X", 3),
        ]
    )


class TestExecutionOrder:
    """Tests for execution_order."""

    def test_as_soon_as_possible(self, slack_graph) -> None:
        """Test ordering by earliest start."""
        time_info = CriticalPathAnalyzer().analyze(slack_graph).time_info

        order = execution_order(slack_graph, time_info, SchedulingStrategy.AS_SOON_AS_POSSIBLE)

        assert order == ["A", "X", "B", "C", "D"]

    def test_as_late_as_possible(self, slack_graph) -> None:
        """Test that slack tasks are pushed back."""
        time_info = CriticalPathAnalyzer().analyze(slack_graph).time_info

        order = execution_order(slack_graph, time_info, SchedulingStrategy.AS_LATE_AS_POSSIBLE)

        assert order == ["A", "B", "C", "D", "X"]

    def test_resource_leveled_prefers_priority(self, slack_graph) -> None:
        """Test that higher priority tasks are scheduled first."""
        time_info = CriticalPathAnalyzer().analyze(slack_graph).time_info

        order = execution_order(
            slack_graph,
            time_info,
            SchedulingStrategy.RESOURCE_LEVELED,
            {"X": TaskPriority.CRITICAL},
        )

        assert order == ["X", "A", "B", "C", "D"]

    def test_without_timings_returns_topological_order(self, slack_graph) -> None:
        """Test the fallback when CPM is disabled."""
        order = execution_order(slack_graph, {}, SchedulingStrategy.AS_LATE_AS_POSSIBLE)

        assert order == ["A", "X", "B", "C", "D"]

    @pytest.mark.parametrize("strategy", list(SchedulingStrategy))
    def test_always_topological(self, web_app_tasks, strategy) -> None:
        """Test that every strategy respects dependencies."""
        graph, _ = DependencyValidator().validate(web_app_tasks)
        time_info = CriticalPathAnalyzer().analyze(graph).time_info

        order = execution_order(graph, time_info, strategy)
        position = {tid: i for i, tid in enumerate(order)}

        assert len(order) == len(graph)
        for tid, deps in graph.edges.items():
            assert all(position[dep] < position[tid] for dep in deps)
