"""Unit tests for critical path analysis."""

import pytest

from taskflow.core.errors import InternalInvariantError
from taskflow.orchestration.critical_path import CriticalPathAnalyzer, topological_order
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.validator import DependencyValidator


class TestTopologicalOrder:
    """Tests for topological_order."""

    def test_dependencies_come_first(self, web_app_tasks) -> None:
        """Test that every edge points backwards in the order."""
        graph = TaskGraph.from_tasks(web_app_tasks)

        order = topological_order(graph)
        position = {tid: i for i, tid in enumerate(order)}

        assert sorted(order) == sorted(graph.task_ids)
        for tid, deps in graph.edges.items():
            assert all(position[dep] < position[tid] for dep in deps)

    def test_stable_for_independent_tasks(self, make_task) -> None:
        """Test that independent tasks keep input order."""
        graph = TaskGraph.from_tasks([make_task("c"), make_task("a"), make_task("b")])

        assert topological_order(graph) == ["c", "a", "b"]

    def test_cycle_raises_invariant_error(self, make_task) -> None:
        """Test that an unvalidated cyclic graph is rejected with a snapshot."""
        graph = TaskGraph.from_tasks([make_task("a", deps=["b"]), make_task("b", deps=["a"])])

        with pytest.raises(InternalInvariantError) as exc_info:
            topological_order(graph)

        assert exc_info.value.snapshot == {"a": ["b"], "b": ["a"]}


class TestCriticalPathAnalyzer:
    """Tests for CriticalPathAnalyzer."""

    def test_diamond(self, diamond_tasks) -> None:
        """Test the canonical diamond plan."""
        analysis = CriticalPathAnalyzer().analyze(TaskGraph.from_tasks(diamond_tasks))

        assert analysis.total_duration == 16.0
        assert analysis.critical_path == ["A", "B", "D"]
        assert analysis.time_info["D"].earliest_start == 12.0
        assert analysis.time_info["C"].is_critical
        assert analysis.critical_tasks == ["A", "B", "C", "D"]

    def test_float_on_short_branch(self, make_task) -> None:
        """Test total and free float of a task with slack."""
        tasks = [
            make_task("A", 4),
            make_task("B", 8, ["A"]),
            make_task("C", 2, ["A"]),
            make_task("D", 4, ["B", "C"]),
        ]

        analysis = CriticalPathAnalyzer().analyze(TaskGraph.from_tasks(tasks))
        info = analysis.time_info["C"]

        assert info.earliest_start == 4.0
        assert info.latest_start == 10.0
        assert info.total_float == 6.0
        assert info.free_float == 6.0
        assert not info.is_critical
        assert analysis.critical_path == ["A", "B", "D"]

    def test_isolated_task_free_float_equals_total_float(self, diamond_tasks, make_task) -> None:
        """Test that a task without dependents can use all of its float."""
        tasks = [*diamond_tasks, make_task("X", 3)]

        info = CriticalPathAnalyzer().analyze(TaskGraph.from_tasks(tasks)).time_info["X"]

        assert info.total_float == 13.0
        assert info.free_float == info.total_float

    def test_cpm_invariants(self, web_app_tasks) -> None:
        """Test timing invariants on a validated plan."""
        graph, _ = DependencyValidator().validate(web_app_tasks)

        analysis = CriticalPathAnalyzer().analyze(graph)
        info = analysis.time_info

        assert analysis.total_duration == max(i.earliest_finish for i in info.values())
        for tid, deps in graph.edges.items():
            for dep in deps:
                assert info[tid].earliest_start >= info[dep].earliest_finish
        for tid in analysis.critical_path:
            assert info[tid].total_float == 0.0
        assert sum(info[tid].duration for tid in analysis.critical_path) == analysis.total_duration
        assert all(i.total_float >= 0 for i in info.values())

    def test_web_app_critical_path(self, web_app_tasks) -> None:
        """Test the critical path through a realistic plan."""
        graph, _ = DependencyValidator().validate(web_app_tasks)

        analysis = CriticalPathAnalyzer().analyze(graph)

        assert analysis.total_duration == 36.0
        assert analysis.critical_path == ["setup", "models", "api", "unit-tests", "deploy"]
        assert analysis.time_info["ui"].is_critical
        assert analysis.time_info["auth"].total_float == 4.0

    def test_zero_duration_tasks(self, make_task) -> None:
        """Test that milestones of zero hours are handled."""
        tasks = [make_task("start", 0), make_task("work", 5, ["start"]), make_task("end", 0, ["work"])]

        analysis = CriticalPathAnalyzer().analyze(TaskGraph.from_tasks(tasks))

        assert analysis.total_duration == 5.0
        assert analysis.critical_path == ["start", "work", "end"]

    def test_fractional_durations_stay_critical(self, make_task) -> None:
        """Test that float rounding does not knock tasks off the critical path."""
        tasks = [
            make_task("a", 0.1),
            make_task("b", 0.2, ["a"]),
            make_task("c", 0.3),
            make_task("d", 0.1, ["b", "c"]),
        ]

        analysis = CriticalPathAnalyzer().analyze(TaskGraph.from_tasks(tasks))

        assert analysis.time_info["c"].is_critical
        assert analysis.time_info["a"].is_critical
        assert analysis.critical_path[-1] == "d"

    def test_empty_graph(self) -> None:
        """Test that an empty plan has no schedule."""
        analysis = CriticalPathAnalyzer().analyze(TaskGraph())

        assert analysis.total_duration == 0.0
        assert analysis.critical_path == []
        assert analysis.time_info == {}
