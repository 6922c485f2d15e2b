"""Dependency validator - turns declared dependencies into a clean DAG.

Graph defects found in a task plan are repaired rather than rejected:
duplicate, self and dangling dependencies are dropped, redundant direct
dependencies are pruned, and cycles are broken one back edge at a time.
Every repair is reported as a warning.
"""

from typing import Any, Iterable

from loguru import logger

from taskflow.core.errors import InternalInvariantError
from taskflow.orchestration.context import OrchestrationContext
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import Task, ValidationWarning, WarningKind


class DependencyValidator:
    """
    Validate and repair task dependencies.

    ``validate`` never fails on bad input; it always returns an acyclic
    graph together with the list of repairs it made.

    Example:
        >>> validator = DependencyValidator()
        >>> graph, warnings = validator.validate(tasks)
        >>> graph.is_acyclic()
        True
    """

    def validate(
        self,
        tasks: Iterable[Task],
        context: OrchestrationContext | None = None,
    ) -> tuple[TaskGraph, list[ValidationWarning]]:
        """
        Build a validated dependency graph.

        Args:
            tasks: Tasks in input order.
            context: Per-run context carrying the cancellation signal.

        Returns:
            Tuple of (acyclic TaskGraph, warnings).
        """
        context = context or OrchestrationContext()
        warnings: list[ValidationWarning] = []

        graph = self._build_graph(tasks, warnings)
        logger.debug(f"Validating dependencies for {len(graph)} tasks ({graph.edge_count} edges)")

        self._remove_self_dependencies(graph, warnings)
        self._remove_dangling_dependencies(graph, warnings)
        self._remove_redundant_dependencies(graph, warnings, context)
        self._break_cycles(graph, warnings)

        if warnings:
            logger.warning(f"Dependency validation repaired {len(warnings)} defects")
        logger.info(f"Validated graph: {len(graph)} tasks, {graph.edge_count} edges")

        return graph, warnings

    # =========================================================================
    # EDGE PRUNING
    # =========================================================================

    def _build_graph(
        self,
        tasks: Iterable[Task],
        warnings: list[ValidationWarning],
    ) -> TaskGraph:
        graph = TaskGraph()

        for task in tasks:
            if task.id in graph:
                self._warn(
                    warnings,
                    WarningKind.DUPLICATE_TASK,
                    task.id,
                    None,
                    f"Duplicate task id {task.id}; keeping the first occurrence",
                )
                continue

            deps: list[str] = []
            for dep in task.dependencies:
                if dep in deps:
                    self._warn(
                        warnings,
                        WarningKind.DUPLICATE_DEPENDENCY,
                        task.id,
                        dep,
                        f"Task {task.id} lists dependency {dep} more than once",
                    )
                    continue
                deps.append(dep)

            graph.nodes[task.id] = task
            graph.edges[task.id] = deps

        return graph

    def _remove_self_dependencies(
        self,
        graph: TaskGraph,
        warnings: list[ValidationWarning],
    ) -> None:
        for task_id, deps in graph.edges.items():
            if task_id in deps:
                deps.remove(task_id)
                self._warn(
                    warnings,
                    WarningKind.SELF_DEPENDENCY,
                    task_id,
                    task_id,
                    f"Task {task_id} cannot depend on itself; dependency removed",
                )

    def _remove_dangling_dependencies(
        self,
        graph: TaskGraph,
        warnings: list[ValidationWarning],
    ) -> None:
        for task_id, deps in graph.edges.items():
            missing = [d for d in deps if d not in graph.nodes]
            for dep in missing:
                deps.remove(dep)
                self._warn(
                    warnings,
                    WarningKind.DANGLING_DEPENDENCY,
                    task_id,
                    dep,
                    f"Task {task_id} depends on unknown task {dep}; dependency removed",
                )

    def _remove_redundant_dependencies(
        self,
        graph: TaskGraph,
        warnings: list[ValidationWarning],
        context: OrchestrationContext,
    ) -> None:
        """
        Drop direct dependencies already implied by another direct dependency.

        Dependencies are examined in declared order against the ones still
        kept. Paths through the task itself are ignored, so every removal
        leaves the set of tasks reachable from it unchanged.
        """
        for task_id in graph.task_ids:
            if context.should_stop():
                context.cancelled = True
                self._warn(
                    warnings,
                    WarningKind.CANCELLED,
                    task_id,
                    None,
                    f"Redundant dependency pruning cancelled at task {task_id}; "
                    "remaining tasks keep their declared dependencies",
                )
                return

            deps = graph.edges[task_id]
            if len(deps) <= 1:
                continue

            reach = {dep: graph.reachable_from(dep, exclude=task_id) for dep in deps}
            kept = list(deps)

            for dep in deps:
                via = next(
                    (other for other in kept if other != dep and dep in reach[other]),
                    None,
                )
                if via is None:
                    continue
                kept.remove(dep)
                self._warn(
                    warnings,
                    WarningKind.REDUNDANT_DEPENDENCY,
                    task_id,
                    dep,
                    f"Task {task_id}: dependency on {dep} is already implied through {via}; "
                    "dependency removed",
                )

            graph.edges[task_id] = kept

    # =========================================================================
    # CYCLE REPAIR
    # =========================================================================

    def _break_cycles(
        self,
        graph: TaskGraph,
        warnings: list[ValidationWarning],
    ) -> None:
        """Remove back edges until a full DFS pass finds none."""
        for _ in range(graph.edge_count + 1):
            if not self._remove_back_edges(graph, warnings):
                return

        snapshot = graph.snapshot()
        logger.error(f"Cycle repair did not converge; graph snapshot: {snapshot}")
        raise InternalInvariantError("Cycle repair did not converge", snapshot=snapshot)

    def _remove_back_edges(
        self,
        graph: TaskGraph,
        warnings: list[ValidationWarning],
    ) -> int:
        """
        One iterative DFS pass over the graph in input order.

        Each edge ``u -> v`` that reaches a task still on the DFS stack closes
        a cycle; exactly that edge is removed.

        Returns:
            Number of edges removed.
        """
        WHITE, GRAY, BLACK = 0, 1, 2
        colors: dict[str, int] = {node: WHITE for node in graph.edges}
        removed = 0

        for root in graph.task_ids:
            if colors[root] != WHITE:
                continue

            # Frames are (node, next-child-index, children snapshot)
            stack: list[list[Any]] = [[root, 0, tuple(graph.edges[root])]]
            path: list[str] = [root]
            colors[root] = GRAY

            while stack:
                frame = stack[-1]
                node, index, children = frame

                if index >= len(children):
                    colors[node] = BLACK
                    stack.pop()
                    path.pop()
                    continue

                frame[1] += 1
                neighbor = children[index]

                if colors[neighbor] == GRAY:
                    cycle = path[path.index(neighbor):] + [neighbor]
                    graph.remove_edge(node, neighbor)
                    removed += 1
                    self._warn(
                        warnings,
                        WarningKind.CYCLE,
                        node,
                        neighbor,
                        f"Circular dependency {' -> '.join(cycle)} broken by removing "
                        f"dependency {node} -> {neighbor}",
                    )
                elif colors[neighbor] == WHITE:
                    colors[neighbor] = GRAY
                    stack.append([neighbor, 0, tuple(graph.edges[neighbor])])
                    path.append(neighbor)

        return removed

    @staticmethod
    def _warn(
        warnings: list[ValidationWarning],
        kind: WarningKind,
        task_id: str,
        dependency_id: str | None,
        message: str,
    ) -> None:
        warnings.append(
            ValidationWarning(
                kind=kind,
                task_id=task_id,
                dependency_id=dependency_id,
                message=message,
            )
        )
        logger.warning(message)
