"""Unit tests for parallel group discovery."""

import pytest

from taskflow.orchestration.context import OrchestrationContext
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import TaskType
from taskflow.orchestration.parallel import (
    ParallelGroupFinder,
    compute_ancestors,
    compute_descendants,
    mask_members,
)
from taskflow.orchestration.validator import DependencyValidator


class TestParallelGroupFinder:
    """Tests for ParallelGroupFinder."""

    def test_diamond_groups(self, diamond_tasks) -> None:
        """Test that the two middle tasks of a diamond run together."""
        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(diamond_tasks), max_group_size=10)

        assert groups == [["B", "C"]]

    def test_groups_are_independent(self, web_app_tasks) -> None:
        """Test that no group holds a task and one of its ancestors."""
        graph, _ = DependencyValidator().validate(web_app_tasks)
        ancestors = compute_ancestors(graph)

        groups = ParallelGroupFinder().group(graph, max_group_size=10)

        assert groups == [["models", "ui"], ["auth", "api", "e2e-tests"]]
        for group in groups:
            for a in group:
                for b in group:
                    assert a not in mask_members(graph, ancestors[b])

    def test_tasks_appear_in_at_most_one_group(self, web_app_tasks) -> None:
        """Test that groups partition a subset of the tasks."""
        graph, _ = DependencyValidator().validate(web_app_tasks)

        groups = ParallelGroupFinder().group(graph, max_group_size=10)
        members = [tid for group in groups for tid in group]

        assert len(members) == len(set(members))

    def test_serializing_types_not_grouped(self, make_task) -> None:
        """Test that two test or two deployment tasks never share a group."""
        tasks = [
            make_task("t1", type=TaskType.TEST),
            make_task("t2", type=TaskType.TEST),
            make_task("d1", type=TaskType.DEPLOYMENT),
            make_task("d2", type=TaskType.DEPLOYMENT),
        ]

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=10)

        assert groups == [["t1", "d1"], ["t2", "d2"]]

    def test_other_types_group_freely(self, make_task) -> None:
        """Test that feature tasks of the same type can run together."""
        tasks = [make_task("f1"), make_task("f2"), make_task("f3")]

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=10)

        assert groups == [["f1", "f2", "f3"]]

    def test_max_group_size(self, make_task) -> None:
        """Test that groups never exceed the configured size."""
        tasks = [make_task(f"t{i}") for i in range(5)]

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=2)

        assert groups == [["t0", "t1"], ["t2", "t3"]]

    def test_group_size_one_yields_no_groups(self, diamond_tasks) -> None:
        """Test the degenerate size limit."""
        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(diamond_tasks), max_group_size=1)

        assert groups == []

    def test_invalid_group_size(self, diamond_tasks) -> None:
        """Test that a non-positive size is rejected."""
        with pytest.raises(ValueError):
            ParallelGroupFinder().group(TaskGraph.from_tasks(diamond_tasks), max_group_size=0)

    def test_ancestors_memoized_in_context(self, diamond_tasks) -> None:
        """Test that ancestor sets are cached on the per-run context."""
        context = OrchestrationContext()

        graph = TaskGraph.from_tasks(diamond_tasks)

        ParallelGroupFinder().group(graph, 10, context)

        assert mask_members(graph, context.ancestors["D"]) == {"A", "B", "C"}
        assert context.ancestors["A"] == 0

    def test_long_chain_has_no_groups(self, make_task) -> None:
        """Test that a deep dependency chain is grouped quickly and yields nothing."""
        tasks = [make_task("t0")]
        tasks.extend(make_task(f"t{i}", deps=[f"t{i - 1}"]) for i in range(1, 5000))

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=10)

        assert groups == []

    def test_wide_plan_fills_groups_in_input_order(self, make_task) -> None:
        """Test that many independent tasks are packed into full groups."""
        tasks = [make_task(f"t{i}") for i in range(2000)]

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=10)

        assert len(groups) == 200
        assert groups[0] == [f"t{i}" for i in range(10)]
        assert groups[-1] == [f"t{i}" for i in range(1990, 2000)]

    def test_group_skips_relatives_of_any_member(self, make_task) -> None:
        """Test that a dependent of a member is skipped while later tasks still join."""
        tasks = [
            make_task("a"),
            make_task("b"),
            make_task("c", deps=["b"]),
            make_task("d"),
        ]

        groups = ParallelGroupFinder().group(TaskGraph.from_tasks(tasks), max_group_size=10)

        assert groups == [["a", "b", "d"]]


class TestAncestorMasks:
    """Tests for the ancestor and descendant bitmasks."""

    def test_descendants_mirror_ancestors(self, web_app_tasks) -> None:
        """Test that b descends from a exactly when a is an ancestor of b."""
        graph, _ = DependencyValidator().validate(web_app_tasks)
        ancestors = compute_ancestors(graph)
        descendants = compute_descendants(graph)

        for a in graph.task_ids:
            for b in graph.task_ids:
                assert (a in mask_members(graph, ancestors[b])) == (
                    b in mask_members(graph, descendants[a])
                )

    def test_diamond_descendants(self, diamond_tasks) -> None:
        """Test the descendant sets of a diamond."""
        graph = TaskGraph.from_tasks(diamond_tasks)
        descendants = compute_descendants(graph)

        assert mask_members(graph, descendants["A"]) == {"B", "C", "D"}
        assert mask_members(graph, descendants["B"]) == {"D"}
        assert descendants["D"] == 0
