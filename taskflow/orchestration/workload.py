"""Workload balancer - advisory signals about task size and assignee load."""

from dataclasses import dataclass, field

from loguru import logger

from taskflow.orchestration.models import ResourceUtilization, Task

SPLIT_TAG = "consider-splitting"
SPLIT_THRESHOLD = 0.5
DEFAULT_TEAM_SIZE = 3


@dataclass
class WorkloadReport:
    """Tasks annotated by the balancer."""

    tasks: list[Task] = field(default_factory=list)
    split_candidates: list[str] = field(default_factory=list)
    average_hours_per_person: float = 0.0


class WorkloadBalancer:
    """
    Flag tasks that are large relative to the team's capacity.

    A task whose estimate exceeds half of the average per-person load is
    tagged ``consider-splitting`` and gets an explanatory note. Estimates are
    never changed and tasks are never split automatically.
    """

    def balance(self, tasks: list[Task], team_size: int | None = DEFAULT_TEAM_SIZE) -> WorkloadReport:
        """
        Annotate oversized tasks.

        Args:
            tasks: Tasks to inspect (not modified).
            team_size: People available; unknown (None) means 3.

        Returns:
            WorkloadReport with annotated copies of every task.

        Raises:
            ValueError: If team_size is less than 1.
        """
        if team_size is None:
            team_size = DEFAULT_TEAM_SIZE
        if team_size < 1:
            raise ValueError(f"team_size must be at least 1, got {team_size}")

        total_hours = sum(task.estimated_hours for task in tasks)
        avg_hours = total_hours / team_size
        threshold = avg_hours * SPLIT_THRESHOLD

        annotated: list[Task] = []
        candidates: list[str] = []

        for task in tasks:
            if task.estimated_hours > threshold:
                candidates.append(task.id)
                tags = task.tags if SPLIT_TAG in task.tags else [*task.tags, SPLIT_TAG]
                note = (
                    f"Consider splitting: estimated {task.estimated_hours:g}h exceeds 50% "
                    f"of the average per-person load ({avg_hours:.1f}h)"
                )
                notes = f"{task.notes}\n{note}" if task.notes else note
                annotated.append(task.model_copy(update={"tags": tags, "notes": notes}))
            else:
                annotated.append(task)

        if candidates:
            logger.info(f"{len(candidates)} tasks flagged for splitting (avg {avg_hours:.1f}h/person)")

        return WorkloadReport(
            tasks=annotated,
            split_candidates=candidates,
            average_hours_per_person=avg_hours,
        )

    def utilization(self, tasks: list[Task], capacity_hours: float) -> list[ResourceUtilization]:
        """
        Per-assignee load against a capacity (usually the project duration).

        Unassigned tasks are ignored. Assignees are listed in first-seen order.
        """
        allocated: dict[str, float] = {}
        assigned: dict[str, list[str]] = {}

        for task in tasks:
            if not task.assignee:
                continue
            allocated[task.assignee] = allocated.get(task.assignee, 0.0) + task.estimated_hours
            assigned.setdefault(task.assignee, []).append(task.id)

        results: list[ResourceUtilization] = []
        for assignee, hours in allocated.items():
            rate = hours / capacity_hours if capacity_hours > 0 else 0.0
            results.append(
                ResourceUtilization(
                    assignee=assignee,
                    capacity_hours=capacity_hours,
                    allocated_hours=hours,
                    utilization_rate=rate,
                    overallocation=max(0.0, hours - capacity_hours),
                    task_ids=assigned[assignee],
                )
            )

        return results
