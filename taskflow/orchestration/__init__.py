"""Task orchestration - from a flat task plan to an executable schedule.

This module provides the complete orchestration pipeline:
- Dependency validation (declared dependencies -> repaired DAG)
- Critical path analysis (DAG -> CPM timings and critical path)
- Parallel grouping (DAG -> concurrent task groups)
- Priority and workload advice (timings -> escalated priorities, split hints)
- Risk assessment (plan -> risk factors and recommendations)
"""

from taskflow.orchestration.context import EngineState, OrchestrationContext
from taskflow.orchestration.critical_path import (
    CriticalPathAnalysis,
    CriticalPathAnalyzer,
    topological_order,
)
from taskflow.orchestration.engine import (
    OrchestrationEngine,
    OrchestrationOutcome,
    orchestrate,
    orchestrate_concurrently,
)
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import (
    ContingencyPlan,
    OptimizationGoal,
    OrchestrationConfig,
    OrchestrationResult,
    ResourceUtilization,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
    SchedulingStrategy,
    Task,
    TaskPriority,
    TaskStatus,
    TaskTimeInfo,
    TaskType,
    ValidationWarning,
    WarningKind,
)
from taskflow.orchestration.parallel import ParallelGroupFinder
from taskflow.orchestration.presets import (
    OrchestrationPreset,
    ProjectCharacteristics,
    available_presets,
    create_engine,
    recommend_preset,
)
from taskflow.orchestration.priority import PriorityOptimizer
from taskflow.orchestration.risk import RiskAnalyzer
from taskflow.orchestration.scheduling import execution_order
from taskflow.orchestration.validator import DependencyValidator
from taskflow.orchestration.workload import WorkloadBalancer, WorkloadReport

__all__ = [
    # Models
    "ContingencyPlan",
    "OptimizationGoal",
    "OrchestrationConfig",
    "OrchestrationResult",
    "ResourceUtilization",
    "RiskAssessment",
    "RiskCategory",
    "RiskFactor",
    "SchedulingStrategy",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskTimeInfo",
    "TaskType",
    "ValidationWarning",
    "WarningKind",
    # Graph
    "TaskGraph",
    "DependencyValidator",
    "topological_order",
    # Stages
    "CriticalPathAnalysis",
    "CriticalPathAnalyzer",
    "ParallelGroupFinder",
    "PriorityOptimizer",
    "WorkloadBalancer",
    "WorkloadReport",
    "RiskAnalyzer",
    "execution_order",
    # Engine
    "EngineState",
    "OrchestrationContext",
    "OrchestrationEngine",
    "OrchestrationOutcome",
    "orchestrate",
    "orchestrate_concurrently",
    # Presets
    "OrchestrationPreset",
    "ProjectCharacteristics",
    "available_presets",
    "create_engine",
    "recommend_preset",
]
