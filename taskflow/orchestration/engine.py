"""Orchestration engine - coordinates the dependency analysis pipeline.

A run walks a fixed sequence of stages:

    IDLE -> VALIDATING -> ANALYZING -> GROUPING -> OPTIMIZING -> BALANCING -> DONE

or goes straight to FAILED when the configuration is invalid. Stages can be
disabled through config flags, in which case they pass their input through
unchanged. The engine holds no per-run state; everything a run needs lives in
an OrchestrationContext created for that call.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from anyio import CapacityLimiter, create_task_group, to_thread
from loguru import logger
from pydantic import ValidationError

from taskflow import __version__
from taskflow.core.config import Settings
from taskflow.core.errors import ConfigurationError, InternalInvariantError
from taskflow.orchestration.context import EngineState, OrchestrationContext
from taskflow.orchestration.critical_path import CriticalPathAnalysis, CriticalPathAnalyzer
from taskflow.orchestration.graph import TaskGraph
from taskflow.orchestration.models import (
    OrchestrationConfig,
    OrchestrationResult,
    ResourceUtilization,
    RiskAssessment,
    Task,
    TaskPriority,
    ValidationWarning,
)
from taskflow.orchestration.parallel import ParallelGroupFinder
from taskflow.orchestration.priority import PriorityOptimizer
from taskflow.orchestration.risk import RiskAnalyzer
from taskflow.orchestration.scheduling import execution_order
from taskflow.orchestration.validator import DependencyValidator
from taskflow.orchestration.workload import WorkloadBalancer


@dataclass
class OrchestrationOutcome:
    """Terminal state of a run: DONE with a result or FAILED with an error."""

    state: EngineState
    result: OrchestrationResult | None = None
    error: ConfigurationError | None = None
    transitions: list[EngineState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == EngineState.DONE


class OrchestrationEngine:
    """
    Facade over the orchestration stages.

    Example:
        >>> engine = OrchestrationEngine({"max_parallel_tasks": 4})
        >>> result = engine.orchestrate(tasks)
        >>> result.critical_path
        ['A', 'B', 'D']
        >>> result.total_duration
        16.0
    """

    def __init__(
        self,
        config: OrchestrationConfig | dict[str, Any] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the engine.

        The configuration is validated at the start of every run, so an
        invalid configuration fails that run rather than construction.

        Args:
            config: Config model or overrides; missing values come from settings.
            settings: Optional settings override for defaults.
        """
        self._config = config
        self.settings = settings

        self.validator = DependencyValidator()
        self.analyzer = CriticalPathAnalyzer()
        self.group_finder = ParallelGroupFinder()
        self.priority_optimizer = PriorityOptimizer()
        self.workload_balancer = WorkloadBalancer()
        self.risk_analyzer = RiskAnalyzer()

    def resolve_config(self) -> OrchestrationConfig:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If any option is invalid or unknown.
        """
        try:
            if isinstance(self._config, OrchestrationConfig):
                return OrchestrationConfig.model_validate(self._config.model_dump())
            return OrchestrationConfig.from_settings(self.settings, **(self._config or {}))
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigurationError(
                f"Invalid orchestration config: {details}",
                errors=[{"loc": err["loc"], "msg": err["msg"]} for err in exc.errors()],
            ) from exc

    # =========================================================================
    # PRIMARY INTERFACE
    # =========================================================================

    def orchestrate(
        self,
        tasks: Sequence[Task],
        cancel_event: threading.Event | None = None,
    ) -> OrchestrationResult:
        """
        Orchestrate a task plan.

        Args:
            tasks: Tasks in input order (read only).
            cancel_event: Set it to stop redundant-dependency pruning early.

        Returns:
            OrchestrationResult; ``incomplete`` is set when pruning was cut short.

        Raises:
            ConfigurationError: If the configuration is invalid.
            InternalInvariantError: If a validated graph turns out cyclic.
        """
        outcome = self.run(tasks, cancel_event=cancel_event)
        if outcome.error is not None:
            raise outcome.error
        if outcome.result is None:
            raise InternalInvariantError(
                f"Orchestration ended in state {outcome.state.value} without a result"
            )
        return outcome.result

    def run(
        self,
        tasks: Sequence[Task],
        cancel_event: threading.Event | None = None,
    ) -> OrchestrationOutcome:
        """
        Run the state machine and report its terminal state.

        Configuration errors end in FAILED without a result; internal
        invariant errors propagate.
        """
        context = OrchestrationContext(cancel_event=cancel_event)

        try:
            config = self.resolve_config()
        except ConfigurationError as exc:
            context.advance(EngineState.FAILED)
            logger.error(str(exc))
            return OrchestrationOutcome(
                state=EngineState.FAILED,
                error=exc,
                transitions=list(context.transitions),
            )

        context.set_timeout(config.pruning_timeout)
        logger.info(f"Starting orchestration of {len(tasks)} tasks")

        # Validating
        context.advance(EngineState.VALIDATING)
        graph, warnings = self.validator.validate(tasks, context)

        # Analyzing
        context.advance(EngineState.ANALYZING)
        if config.enable_critical_path:
            analysis = self.analyzer.analyze(graph)
        else:
            logger.debug("Critical path analysis disabled")
            analysis = CriticalPathAnalysis()

        # Grouping
        context.advance(EngineState.GROUPING)
        if config.enable_parallel_optimization:
            groups = self.group_finder.group(graph, config.max_parallel_tasks, context)
        else:
            logger.debug("Parallel optimization disabled")
            groups = []

        # Optimizing
        context.advance(EngineState.OPTIMIZING)
        changes = self.priority_optimizer.optimize(graph, analysis.time_info)
        updated = [
            task.model_copy(update={"priority": changes[task.id]}) if task.id in changes else task
            for task in graph.nodes.values()
        ]

        # Balancing
        context.advance(EngineState.BALANCING)
        split_candidates: list[str] = []
        utilization: list[ResourceUtilization] = []
        if config.enable_resource_leveling:
            report = self.workload_balancer.balance(updated, config.team_size)
            updated = report.tasks
            split_candidates = report.split_candidates
            if config.enable_critical_path:
                utilization = self.workload_balancer.utilization(updated, analysis.total_duration)
        else:
            logger.debug("Resource leveling disabled")

        result = self._assemble(
            config, context, graph.snapshot(), analysis, groups, updated,
            changes, split_candidates, utilization, warnings,
        )
        context.advance(EngineState.DONE)
        result.metadata["transitions"] = [s.value for s in context.transitions]

        logger.info(
            f"Orchestration complete: {len(updated)} tasks, "
            f"estimated duration {result.total_duration}h"
            + (" (incomplete)" if result.incomplete else "")
        )

        return OrchestrationOutcome(
            state=EngineState.DONE,
            result=result,
            transitions=list(context.transitions),
        )

    def _assemble(
        self,
        config: OrchestrationConfig,
        context: OrchestrationContext,
        dependency_graph: dict[str, list[str]],
        analysis: CriticalPathAnalysis,
        groups: list[list[str]],
        tasks: list[Task],
        changes: dict[str, TaskPriority],
        split_candidates: list[str],
        utilization: list[ResourceUtilization],
        warnings: list[ValidationWarning],
    ) -> OrchestrationResult:
        """Build the result object from stage outputs."""
        final_graph = TaskGraph(
            nodes={t.id: t for t in tasks},
            edges={tid: list(deps) for tid, deps in dependency_graph.items()},
        )
        order = execution_order(
            final_graph,
            analysis.time_info,
            config.scheduling_strategy,
            {t.id: t.priority for t in tasks},
        )

        if config.enable_risk_analysis:
            assessment = self.risk_analyzer.assess(tasks, analysis.time_info, utilization)
        else:
            assessment = RiskAssessment()

        recommendations = self.risk_analyzer.recommend(
            tasks,
            analysis.critical_path,
            groups,
            utilization,
            assessment,
            split_candidates,
            warnings,
            config.optimization_goal,
        )

        return OrchestrationResult(
            total_duration=analysis.total_duration,
            buffered_duration=analysis.total_duration * (1 + config.buffer_percentage),
            critical_path=analysis.critical_path,
            parallel_groups=groups,
            time_info=analysis.time_info,
            dependency_graph=dependency_graph,
            execution_order=order,
            tasks=tasks,
            priority_changes=changes,
            split_candidates=split_candidates,
            resource_utilization=utilization,
            recommendations=recommendations,
            risk_assessment=assessment,
            warnings=warnings,
            incomplete=context.cancelled,
            metadata={
                "orchestrated_at": datetime.now(timezone.utc).isoformat(),
                "strategy": config.scheduling_strategy.value,
                "goal": config.optimization_goal.value,
                "version": __version__,
            },
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def orchestrate(tasks: Sequence[Task], **config: Any) -> OrchestrationResult:
    """
    Convenience function to orchestrate with config overrides.

    Example:
        >>> result = orchestrate(tasks, max_parallel_tasks=3)
        >>> len(result.parallel_groups)
        2
    """
    return OrchestrationEngine(config).orchestrate(tasks)


async def orchestrate_concurrently(
    engine: OrchestrationEngine,
    plans: dict[str, Sequence[Task]],
    max_workers: int | None = None,
) -> dict[str, OrchestrationResult]:
    """
    Orchestrate several independent plans on worker threads.

    Runs share nothing but the (stateless) engine.

    Args:
        engine: Engine to run every plan with.
        plans: Plan name -> tasks.
        max_workers: Optional cap on concurrent worker threads.

    Returns:
        Plan name -> result, in the order plans were given.
    """
    limiter = CapacityLimiter(max_workers) if max_workers else None
    results: dict[str, OrchestrationResult] = {}

    async def worker(name: str, tasks: Sequence[Task]) -> None:
        results[name] = await to_thread.run_sync(engine.orchestrate, tasks, limiter=limiter)

    async with create_task_group() as tg:
        for name, tasks in plans.items():
            tg.start_soon(worker, name, tasks)

    return {name: results[name] for name in plans}
