"""Priority optimizer - escalates priorities from graph structure."""

from loguru import logger

from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import TaskPriority, TaskTimeInfo

HIGH_DEPENDENT_THRESHOLD = 3
MEDIUM_DEPENDENT_THRESHOLD = 2


class PriorityOptimizer:
    """
    Raise task priorities based on criticality and fan-out.

    Rules, highest wins:

    - critical task (zero float) -> CRITICAL
    - three or more direct dependents -> HIGH
    - two direct dependents -> MEDIUM

    Escalation is monotonic: a rule never lowers a priority that upstream
    planning already set higher.
    """

    def target_priority(self, dependent_count: int, is_critical: bool) -> TaskPriority | None:
        """Priority a task qualifies for, or None when no rule applies."""
        if is_critical:
            return TaskPriority.CRITICAL
        if dependent_count >= HIGH_DEPENDENT_THRESHOLD:
            return TaskPriority.HIGH
        if dependent_count >= MEDIUM_DEPENDENT_THRESHOLD:
            return TaskPriority.MEDIUM
        return None

    def optimize(
        self,
        graph: TaskGraph,
        time_info: dict[str, TaskTimeInfo],
    ) -> dict[str, TaskPriority]:
        """
        Compute escalated priorities.

        Args:
            graph: Validated task graph.
            time_info: CPM timings (may be empty when CPM is disabled).

        Returns:
            Task ID -> new priority, for tasks whose priority was raised.
        """
        dependents = graph.dependents_map()
        changes: dict[str, TaskPriority] = {}

        for tid, task in graph.nodes.items():
            info = time_info.get(tid)
            target = self.target_priority(
                len(dependents[tid]),
                is_critical=info is not None and info.is_critical,
            )
            if target is not None and target.rank > task.priority.rank:
                changes[tid] = target
                logger.debug(f"Escalating {tid}: {task.priority.value} -> {target.value}")

        logger.info(f"Escalated priority of {len(changes)} tasks")
        return changes
