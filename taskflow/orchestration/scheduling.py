"""Strategy-driven execution order."""

import heapq

from taskflow.orchestration.critical_path import topological_order
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import SchedulingStrategy, TaskPriority, TaskTimeInfo


def execution_order(
    graph: TaskGraph,
    time_info: dict[str, TaskTimeInfo],
    strategy: SchedulingStrategy,
    priorities: dict[str, TaskPriority] | None = None,
) -> list[str]:
    """
    List-schedule tasks according to a strategy.

    Kahn's algorithm with a heap of ready tasks, so the result is always a
    valid topological order. Ready tasks are keyed by earliest start
    (AS_SOON_AS_POSSIBLE), latest start (AS_LATE_AS_POSSIBLE) or by priority,
    float and duration (RESOURCE_LEVELED). Ties fall back to the plain
    topological position. Without timings the plain order is returned.

    Args:
        graph: Acyclic task graph.
        time_info: CPM timings, possibly empty.
        strategy: Scheduling strategy.
        priorities: Effective priorities (defaults to the tasks' own).

    Returns:
        Task IDs in execution order.
    """
    base_order = topological_order(graph)
    if not time_info:
        return base_order

    position = {tid: i for i, tid in enumerate(base_order)}
    priorities = priorities or {}

    def key(tid: str) -> tuple[float, ...]:
        info = time_info[tid]
        if strategy == SchedulingStrategy.AS_LATE_AS_POSSIBLE:
            return (info.latest_start, position[tid])
        if strategy == SchedulingStrategy.RESOURCE_LEVELED:
            priority = priorities.get(tid, graph.nodes[tid].priority)
            return (-priority.rank, info.total_float, info.duration, position[tid])
        return (info.earliest_start, position[tid])

    dependents = graph.dependents_map()
    in_degree = {tid: len(graph.dependencies(tid)) for tid in base_order}
    ready = [(key(tid), tid) for tid in base_order if in_degree[tid] == 0]
    heapq.heapify(ready)
    order: list[str] = []

    while ready:
        _, tid = heapq.heappop(ready)
        order.append(tid)
        for dependent in dependents[tid]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, (key(dependent), dependent))

    return order
