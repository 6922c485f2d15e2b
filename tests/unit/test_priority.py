"""Unit tests for priority escalation."""

from taskflow.orchestration.critical_path import CriticalPathAnalyzer
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import TaskPriority
from taskflow.orchestration.priority import PriorityOptimizer


def _hub_plan(make_task, fan_out: int, **hub_fields) -> TaskGraph:
    tasks = [make_task("hub", 2, **hub_fields)]
    tasks.extend(make_task(f"leaf{i}", 4, ["hub"]) for i in range(fan_out))
    return TaskGraph.from_tasks(tasks)


class TestPriorityOptimizer:
    """Tests for PriorityOptimizer."""

    def test_target_priority_rules(self) -> None:
        """Test the escalation table."""
        optimizer = PriorityOptimizer()

        assert optimizer.target_priority(0, is_critical=True) == TaskPriority.CRITICAL
        assert optimizer.target_priority(5, is_critical=False) == TaskPriority.HIGH
        assert optimizer.target_priority(3, is_critical=False) == TaskPriority.HIGH
        assert optimizer.target_priority(2, is_critical=False) == TaskPriority.MEDIUM
        assert optimizer.target_priority(1, is_critical=False) is None

    def test_fan_out_escalates_to_high(self, make_task) -> None:
        """Test that five dependents make a task HIGH without timings."""
        graph = _hub_plan(make_task, 5)

        changes = PriorityOptimizer().optimize(graph, {})

        assert changes == {"hub": TaskPriority.HIGH}

    def test_critical_task_escalates_to_critical(self, make_task) -> None:
        """Test that a zero-float task becomes CRITICAL."""
        graph = _hub_plan(make_task, 5)
        time_info = CriticalPathAnalyzer().analyze(graph).time_info

        changes = PriorityOptimizer().optimize(graph, time_info)

        assert changes["hub"] == TaskPriority.CRITICAL
        assert all(changes[f"leaf{i}"] == TaskPriority.CRITICAL for i in range(5))

    def test_never_downgrades(self, make_task) -> None:
        """Test that a priority set higher upstream is kept."""
        graph = _hub_plan(make_task, 2, priority=TaskPriority.CRITICAL)

        changes = PriorityOptimizer().optimize(graph, {})

        assert "hub" not in changes

    def test_low_priority_raised_to_medium(self, make_task) -> None:
        """Test that two dependents lift a LOW task."""
        graph = _hub_plan(make_task, 2, priority=TaskPriority.LOW)

        changes = PriorityOptimizer().optimize(graph, {})

        assert changes == {"hub": TaskPriority.MEDIUM}

    def test_no_rule_no_change(self, make_task) -> None:
        """Test that plain tasks are left alone."""
        graph = TaskGraph.from_tasks([make_task("a", priority=TaskPriority.LOW), make_task("b")])

        assert PriorityOptimizer().optimize(graph, {}) == {}
