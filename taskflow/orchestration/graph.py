"""Task graph - canonical in-memory dependency model.

Edges point from a task to the tasks it depends on. Iteration order of
``nodes`` and ``edges`` follows the order tasks were added, which keeps every
traversal built on top of the graph deterministic for identical input.
"""

from collections import deque
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from taskflow.orchestration.models import Task


class TaskGraph(BaseModel):
    """Graph representation of task dependencies.

    Example:
        >>> graph = TaskGraph.from_tasks(tasks)
        >>> graph.dependencies("api")
        ['models']
        >>> graph.dependents("models")
        ['api']
    """

    model_config = ConfigDict(frozen=False)

    nodes: dict[str, Task] = Field(
        default_factory=dict,
        description="Task ID -> Task mapping",
    )
    edges: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Task ID -> list of dependency IDs",
    )

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "TaskGraph":
        """Build a graph straight from declared dependencies (no validation)."""
        graph = cls()
        for task in tasks:
            graph.add_task(task)
        return graph

    def add_task(self, task: Task) -> None:
        """Add a task and its declared dependencies."""
        self.nodes[task.id] = task
        self.edges[task.id] = list(task.dependencies)

    def get_task(self, task_id: str) -> Task | None:
        return self.nodes.get(task_id)

    @property
    def task_ids(self) -> list[str]:
        """Task IDs in insertion order."""
        return list(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.nodes

    def dependencies(self, task_id: str) -> list[str]:
        """Direct dependencies of a task."""
        return self.edges.get(task_id, [])

    def dependents(self, task_id: str) -> list[str]:
        """Tasks that directly depend on the given task."""
        return [tid for tid, deps in self.edges.items() if task_id in deps]

    def dependents_map(self) -> dict[str, list[str]]:
        """Reverse adjacency for every node, in insertion order.

        Use this instead of repeated ``dependents()`` calls when walking the
        whole graph.
        """
        reverse: dict[str, list[str]] = {tid: [] for tid in self.nodes}
        for tid, deps in self.edges.items():
            for dep in deps:
                if dep in reverse:
                    reverse[dep].append(tid)
        return reverse

    def has_edge(self, task_id: str, dependency_id: str) -> bool:
        return dependency_id in self.edges.get(task_id, [])

    def remove_edge(self, task_id: str, dependency_id: str) -> None:
        """Remove ``task_id -> dependency_id`` if present."""
        deps = self.edges.get(task_id)
        if deps and dependency_id in deps:
            deps.remove(dependency_id)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.edges.values())

    def duration(self, task_id: str) -> float:
        """Estimated hours of a task."""
        return self.nodes[task_id].estimated_hours

    # =========================================================================
    # TRAVERSAL
    # =========================================================================

    def reachable_from(self, start: str, exclude: str | None = None) -> set[str]:
        """
        All tasks reachable from ``start`` through one or more dependency edges.

        Args:
            start: Task to start from (not included unless on a cycle).
            exclude: Task that paths may not pass through.

        Returns:
            Set of reachable task IDs.
        """
        seen: set[str] = set()
        queue: deque[str] = deque(
            d for d in self.edges.get(start, []) if d != exclude
        )

        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            for dep in self.edges.get(current, []):
                if dep != exclude and dep not in seen:
                    queue.append(dep)

        return seen

    def transitive_closure(self) -> dict[str, set[str]]:
        """Reachability sets for every task."""
        return {tid: self.reachable_from(tid) for tid in self.nodes}

    def find_cycle(self) -> list[str] | None:
        """
        Find one dependency cycle, if any.

        Uses an iterative DFS with an explicit stack of
        ``(node, next-child-index)`` frames.

        Returns:
            Cycle as a list of task IDs ending where it started, or None.

        Example:
            >>> TaskGraph(edges={"a": ["b"], "b": ["a"]}).find_cycle()
            ['a', 'b', 'a']
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        colors: dict[str, int] = {node: WHITE for node in self.edges}

        for root in self.edges:
            if colors[root] != WHITE:
                continue

            stack: list[list[Any]] = [[root, 0]]
            path: list[str] = [root]
            colors[root] = GRAY

            while stack:
                frame = stack[-1]
                node, index = frame[0], frame[1]
                deps = self.edges.get(node, [])

                if index >= len(deps):
                    colors[node] = BLACK
                    stack.pop()
                    path.pop()
                    continue

                frame[1] += 1
                neighbor = deps[index]
                if neighbor not in colors:
                    continue
                if colors[neighbor] == GRAY:
                    start = path.index(neighbor)
                    return path[start:] + [neighbor]
                if colors[neighbor] == WHITE:
                    colors[neighbor] = GRAY
                    stack.append([neighbor, 0])
                    path.append(neighbor)

        return None

    def is_acyclic(self) -> bool:
        return self.find_cycle() is None

    def copy_graph(self) -> "TaskGraph":
        """Copy with independent edge lists (tasks are shared, read only)."""
        return TaskGraph(
            nodes=dict(self.nodes),
            edges={tid: list(deps) for tid, deps in self.edges.items()},
        )

    def snapshot(self) -> dict[str, list[str]]:
        """Plain adjacency dict for diagnostics."""
        return {tid: list(deps) for tid, deps in self.edges.items()}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "nodes": {k: v.model_dump() for k, v in self.nodes.items()},
            "edges": self.snapshot(),
        }
