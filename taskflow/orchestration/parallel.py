"""Parallel group finder - partitions independent tasks into concurrent groups."""

from loguru import logger

from taskflow.orchestration.context import OrchestrationContext
from taskflow.orchestration.critical_path import topological_order
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import TaskType

# Two tasks of the same serializing type compete for the same environment
# (one deploy pipeline, one test rig) and are never grouped together. This is
# a fixed simplification, not a configurable resource model.
SERIALIZING_TYPES = frozenset({TaskType.DEPLOYMENT, TaskType.TEST})


def compute_ancestors(graph: TaskGraph) -> dict[str, int]:
    """
    Transitive dependency set of every task (graph must be acyclic).

    Each set is an integer bitmask: bit ``i`` stands for ``graph.task_ids[i]``.
    """
    position = {tid: i for i, tid in enumerate(graph.task_ids)}
    ancestors: dict[str, int] = {}
    for tid in topological_order(graph):
        mask = 0
        for dep in graph.dependencies(tid):
            mask |= ancestors[dep] | (1 << position[dep])
        ancestors[tid] = mask
    return ancestors


def compute_descendants(graph: TaskGraph) -> dict[str, int]:
    """Transitive dependent set of every task, as bitmasks like compute_ancestors."""
    position = {tid: i for i, tid in enumerate(graph.task_ids)}
    dependents = graph.dependents_map()
    descendants: dict[str, int] = {}
    for tid in reversed(topological_order(graph)):
        mask = 0
        for dependent in dependents[tid]:
            mask |= descendants[dependent] | (1 << position[dependent])
        descendants[tid] = mask
    return descendants


def mask_members(graph: TaskGraph, mask: int) -> set[str]:
    """Decode a task bitmask back into task IDs."""
    return {tid for i, tid in enumerate(graph.task_ids) if mask >> i & 1}


class ParallelGroupFinder:
    """
    Greedily group tasks that can run at the same time.

    Two tasks are compatible when neither depends on the other, directly or
    transitively, and they are not both of the same serializing type.

    Example:
        >>> finder = ParallelGroupFinder()
        >>> finder.group(graph, max_group_size=3)
        [['B', 'C']]
    """

    def group(
        self,
        graph: TaskGraph,
        max_group_size: int,
        context: OrchestrationContext | None = None,
    ) -> list[list[str]]:
        """
        Partition tasks into groups of mutually compatible tasks.

        Candidates are considered in input order. Every group keeps a bitmask
        of the tasks it conflicts with, so each candidate is found with a few
        integer operations instead of a pairwise check against every member.

        Args:
            graph: Acyclic task graph.
            max_group_size: Upper bound on group size.
            context: Per-run context used to memoize ancestor sets.

        Returns:
            Groups with more than one member, in discovery order.

        Raises:
            ValueError: If max_group_size is not positive.
        """
        if max_group_size <= 0:
            raise ValueError(f"max_group_size must be positive, got {max_group_size}")

        context = context or OrchestrationContext()
        if not context.ancestors:
            context.ancestors = compute_ancestors(graph)
        ancestors = context.ancestors
        descendants = compute_descendants(graph)

        task_ids = graph.task_ids
        type_masks: dict[TaskType, int] = {}
        for i, tid in enumerate(task_ids):
            task_type = graph.nodes[tid].type
            if task_type in SERIALIZING_TYPES:
                type_masks[task_type] = type_masks.get(task_type, 0) | (1 << i)

        def conflicts(i: int) -> int:
            tid = task_ids[i]
            mask = ancestors[tid] | descendants[tid] | (1 << i)
            return mask | type_masks.get(graph.nodes[tid].type, 0)

        groups: list[list[str]] = []
        remaining = (1 << len(task_ids)) - 1

        while remaining:
            first = (remaining & -remaining).bit_length() - 1
            group = [task_ids[first]]
            members = 1 << first
            blocked = conflicts(first)
            candidates = remaining & ~blocked

            while candidates and len(group) < max_group_size:
                lowest = candidates & -candidates
                index = lowest.bit_length() - 1
                group.append(task_ids[index])
                members |= lowest
                blocked |= conflicts(index)
                candidates &= ~blocked

            remaining &= ~members
            if len(group) > 1:
                groups.append(group)

        logger.info(f"Identified {len(groups)} parallel groups")
        return groups

