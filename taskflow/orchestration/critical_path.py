"""Critical path analysis (CPM) over a validated task graph.

Runs the classic forward/backward pass to compute earliest and latest
start/finish times, total and free float, and extracts one critical path.
All durations are in hours from project start.
"""

import math
from collections import deque
from dataclasses import dataclass, field

from loguru import logger

from taskflow.core.errors import InternalInvariantError
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import TaskTimeInfo

FLOAT_TOLERANCE = 1e-9


def is_zero(value: float) -> bool:
    """Float comparison used for slack checks."""
    return math.isclose(value, 0.0, abs_tol=FLOAT_TOLERANCE)


@dataclass
class CriticalPathAnalysis:
    """Output of a CPM run."""

    time_info: dict[str, TaskTimeInfo] = field(default_factory=dict)
    critical_path: list[str] = field(default_factory=list)
    total_duration: float = 0.0
    topological_order: list[str] = field(default_factory=list)

    @property
    def critical_tasks(self) -> list[str]:
        return [tid for tid, info in self.time_info.items() if info.is_critical]


def topological_order(graph: TaskGraph) -> list[str]:
    """
    Kahn's algorithm, stable in insertion order.

    Dependencies always precede their dependents.

    Raises:
        InternalInvariantError: If the graph still contains a cycle.
    """
    dependents = graph.dependents_map()
    in_degree = {tid: len(graph.dependencies(tid)) for tid in graph.task_ids}
    queue: deque[str] = deque(tid for tid, degree in in_degree.items() if degree == 0)
    order: list[str] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(graph):
        snapshot = graph.snapshot()
        stuck = sorted(set(graph.task_ids) - set(order))
        logger.error(
            f"Topological sort stopped with {len(stuck)} unsorted tasks {stuck}; "
            f"graph snapshot: {snapshot}"
        )
        raise InternalInvariantError(
            f"Dependency graph is not acyclic; unsorted tasks: {stuck}",
            snapshot=snapshot,
        )

    return order


class CriticalPathAnalyzer:
    """
    Compute CPM timings and the critical path.

    Example:
        >>> analysis = CriticalPathAnalyzer().analyze(graph)
        >>> analysis.total_duration
        16.0
        >>> analysis.critical_path
        ['A', 'B', 'D']
    """

    def analyze(self, graph: TaskGraph) -> CriticalPathAnalysis:
        """
        Run the forward and backward passes.

        Args:
            graph: Acyclic task graph.

        Returns:
            CriticalPathAnalysis with per-task timings.
        """
        if len(graph) == 0:
            return CriticalPathAnalysis()

        order = topological_order(graph)
        dependents = graph.dependents_map()

        # Forward pass
        earliest_start: dict[str, float] = {}
        earliest_finish: dict[str, float] = {}
        for tid in order:
            start = max((earliest_finish[d] for d in graph.dependencies(tid)), default=0.0)
            earliest_start[tid] = start
            earliest_finish[tid] = start + graph.duration(tid)

        total_duration = max(earliest_finish.values())

        # Backward pass
        latest_start: dict[str, float] = {}
        latest_finish: dict[str, float] = {}
        for tid in reversed(order):
            finish = min(
                (latest_start[d] for d in dependents[tid]),
                default=total_duration,
            )
            latest_finish[tid] = finish
            latest_start[tid] = finish - graph.duration(tid)

        time_info: dict[str, TaskTimeInfo] = {}
        for tid in graph.task_ids:
            total_float = latest_start[tid] - earliest_start[tid]
            if is_zero(total_float):
                total_float = 0.0
            if dependents[tid]:
                free_float = min(earliest_start[d] for d in dependents[tid]) - earliest_finish[tid]
            else:
                free_float = total_float
            time_info[tid] = TaskTimeInfo(
                duration=graph.duration(tid),
                earliest_start=earliest_start[tid],
                earliest_finish=earliest_finish[tid],
                latest_start=latest_start[tid],
                latest_finish=latest_finish[tid],
                total_float=total_float,
                free_float=free_float,
                is_critical=total_float == 0.0,
            )

        critical_path = self._trace_critical_path(graph, time_info, dependents)

        logger.info(
            f"Critical path: {len(critical_path)} tasks, total duration {total_duration}h"
        )

        return CriticalPathAnalysis(
            time_info=time_info,
            critical_path=critical_path,
            total_duration=total_duration,
            topological_order=order,
        )

    @staticmethod
    def _trace_critical_path(
        graph: TaskGraph,
        time_info: dict[str, TaskTimeInfo],
        dependents: dict[str, list[str]],
    ) -> list[str]:
        """
        Walk zero-float tasks from a start task to an end task.

        Starts at the critical task without dependencies that has the
        smallest id and follows the smallest-id critical dependent that
        starts exactly when the current task finishes.
        """
        starts = [
            tid for tid in graph.task_ids
            if time_info[tid].is_critical and not graph.dependencies(tid)
        ]
        if not starts:
            return []

        current = min(starts)
        path = [current]

        while dependents[current]:
            finish = time_info[current].earliest_finish
            candidates = [
                d for d in dependents[current]
                if time_info[d].is_critical
                and math.isclose(time_info[d].earliest_start, finish, abs_tol=FLOAT_TOLERANCE)
            ]
            if not candidates:
                break
            current = min(candidates)
            path.append(current)

        return path
