"""Pydantic models for task orchestration.

This module defines the data structures exchanged with the orchestration
engine: tasks and their enums, the orchestration configuration, and the
result of a run (time info, risk assessment, resource utilization).
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskflow.core.config import Settings, get_settings


# =============================================================================
# ENUMS
# =============================================================================


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"
    REVIEW = "review"
    FAILED = "failed"


class TaskPriority(str, Enum):
    """Task priority, ordered from LOW to CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Numeric rank used for comparisons (LOW=1 ... CRITICAL=4)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
    TaskPriority.CRITICAL: 4,
}


class TaskType(str, Enum):
    """Kind of work a task represents."""

    FEATURE = "feature"
    BUG_FIX = "bug_fix"
    REFACTOR = "refactor"
    TEST = "test"
    DOCUMENT = "document"
    ANALYSIS = "analysis"
    DESIGN = "design"
    DEPLOYMENT = "deployment"
    RESEARCH = "research"


class SchedulingStrategy(str, Enum):
    """How the execution order is derived from the schedule."""

    AS_SOON_AS_POSSIBLE = "as_soon_as_possible"
    AS_LATE_AS_POSSIBLE = "as_late_as_possible"
    RESOURCE_LEVELED = "resource_leveled"


class OptimizationGoal(str, Enum):
    """What the caller wants the plan optimized for."""

    MINIMIZE_DURATION = "minimize_duration"
    MINIMIZE_COST = "minimize_cost"
    MAXIMIZE_QUALITY = "maximize_quality"


class RiskCategory(str, Enum):
    """Category of a risk factor."""

    SCHEDULE = "schedule"
    RESOURCE = "resource"
    TECHNICAL = "technical"
    QUALITY = "quality"


class WarningKind(str, Enum):
    """Kind of graph defect repaired during validation."""

    DUPLICATE_TASK = "duplicate_task"
    DUPLICATE_DEPENDENCY = "duplicate_dependency"
    SELF_DEPENDENCY = "self_dependency"
    DANGLING_DEPENDENCY = "dangling_dependency"
    REDUNDANT_DEPENDENCY = "redundant_dependency"
    CYCLE = "cycle"
    CANCELLED = "cancelled"


# =============================================================================
# TASK
# =============================================================================


class Task(BaseModel):
    """A unit of planned work.

    Example:
        >>> task = Task(
        ...     id="api",
        ...     title="Implement REST endpoints",
        ...     dependencies=["models"],
        ...     estimated_hours=12,
        ... )
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique task identifier",
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Task title",
    )
    description: str = Field(
        default="",
        description="Detailed task description",
    )
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    type: TaskType = Field(default=TaskType.FEATURE)
    dependencies: list[str] = Field(
        default_factory=list,
        description="Task IDs this task depends on",
    )
    estimated_hours: float = Field(
        default=8.0,
        ge=0,
        description="Estimated effort in hours",
    )
    actual_hours: float | None = Field(default=None, ge=0)
    assignee: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    complexity: int | None = Field(
        default=None,
        ge=1,
        le=10,
        description="Technical complexity (1-10)",
    )
    requires_review: bool = True
    progress: int = Field(default=0, ge=0, le=100)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    due_date: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Tags behave as a set; keep first-seen order."""
        return list(dict.fromkeys(v))


# =============================================================================
# CONFIGURATION
# =============================================================================


class OrchestrationConfig(BaseModel):
    """Options recognized by the orchestration engine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scheduling_strategy: SchedulingStrategy = SchedulingStrategy.AS_SOON_AS_POSSIBLE
    optimization_goal: OptimizationGoal = OptimizationGoal.MINIMIZE_DURATION
    max_parallel_tasks: int = Field(
        default=10,
        gt=0,
        description="Maximum number of tasks in one parallel group",
    )
    buffer_percentage: float = Field(default=0.1, ge=0.0, le=1.0)
    team_size: int = Field(default=3, ge=1)
    pruning_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds allowed for redundant-dependency pruning",
    )

    enable_critical_path: bool = True
    enable_parallel_optimization: bool = True
    enable_resource_leveling: bool = True
    enable_risk_analysis: bool = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "OrchestrationConfig":
        """Build a config seeded with defaults from the environment."""
        settings = settings or get_settings()
        values: dict[str, Any] = {
            "max_parallel_tasks": settings.default_max_parallel_tasks,
            "team_size": settings.default_team_size,
            "buffer_percentage": settings.default_buffer_percentage,
            "pruning_timeout": settings.pruning_timeout,
        }
        values.update(overrides)
        return cls.model_validate(values)


# =============================================================================
# RESULTS
# =============================================================================


class ValidationWarning(BaseModel):
    """A graph defect that was repaired during validation."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    task_id: str
    dependency_id: str | None = None
    message: str

    def __str__(self) -> str:
        return self.message


class TaskTimeInfo(BaseModel):
    """CPM timings for one task, in hours from project start."""

    model_config = ConfigDict(frozen=True)

    duration: float
    earliest_start: float
    earliest_finish: float
    latest_start: float
    latest_finish: float
    total_float: float
    free_float: float
    is_critical: bool


class RiskFactor(BaseModel):
    """A single identified project risk."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    probability: float = Field(ge=0.0, le=1.0)
    impact: float = Field(ge=0.0, le=10.0)
    risk_score: float = Field(ge=0.0, le=10.0)
    affected_task_ids: list[str] = Field(default_factory=list)
    category: RiskCategory


class ContingencyPlan(BaseModel):
    """Response plan prepared for a high-scoring risk factor."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    trigger_conditions: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)
    estimated_cost: float = Field(default=0.0, ge=0.0)
    estimated_time: float = Field(
        default=0.0,
        ge=0.0,
        description="Hours needed to carry out the plan",
    )


class RiskAssessment(BaseModel):
    """Aggregated risk picture of a plan."""

    overall_risk_level: float = Field(default=0.0, ge=0.0, le=10.0)
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    mitigation_suggestions: list[str] = Field(default_factory=list)
    contingency_plans: list[ContingencyPlan] = Field(default_factory=list)


class ResourceUtilization(BaseModel):
    """Load of one assignee against the project duration."""

    model_config = ConfigDict(frozen=True)

    assignee: str
    capacity_hours: float
    allocated_hours: float
    utilization_rate: float
    overallocation: float
    task_ids: list[str] = Field(default_factory=list)


class OrchestrationResult(BaseModel):
    """Everything an orchestration run produces."""

    total_duration: float = 0.0
    buffered_duration: float = 0.0
    critical_path: list[str] = Field(default_factory=list)
    parallel_groups: list[list[str]] = Field(default_factory=list)
    time_info: dict[str, TaskTimeInfo] = Field(default_factory=dict)
    dependency_graph: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Validated task ID -> dependency IDs",
    )
    execution_order: list[str] = Field(default_factory=list)
    tasks: list[Task] = Field(
        default_factory=list,
        description="Copies of the input tasks with updated priority/tags/notes",
    )
    priority_changes: dict[str, TaskPriority] = Field(default_factory=dict)
    split_candidates: list[str] = Field(default_factory=list)
    resource_utilization: list[ResourceUtilization] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    incomplete: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    def stats(self) -> dict[str, Any]:
        """Summary numbers for display."""
        total_tasks = len(self.tasks)
        critical_tasks = sum(1 for info in self.time_info.values() if info.is_critical)
        total_float = sum(info.total_float for info in self.time_info.values())
        average_float = total_float / len(self.time_info) if self.time_info else 0.0
        longest_path = max(
            (info.earliest_finish for info in self.time_info.values()),
            default=0.0,
        )
        return {
            "total_tasks": total_tasks,
            "critical_tasks": critical_tasks,
            "parallel_groups": len(self.parallel_groups),
            "average_float": average_float,
            "longest_path": longest_path,
        }
