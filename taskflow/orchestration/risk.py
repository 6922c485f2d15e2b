"""Risk assessment and plan recommendations."""

from loguru import logger

from taskflow.orchestration.models import (
    ContingencyPlan,
    OptimizationGoal,
    ResourceUtilization,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
    Task,
    TaskTimeInfo,
    ValidationWarning,
    WarningKind,
)

LONG_TASK_HOURS = 40.0
CRITICAL_RATIO_RISK = 0.3
CRITICAL_RATIO_RECOMMENDATION = 0.4
HIGH_COMPLEXITY = 7
UNREVIEWED_RATIO = 0.5
HIGH_RISK_LEVEL = 6.0
CONTINGENCY_THRESHOLD = 4.0

_MITIGATIONS: dict[str, list[str]] = {
    "critical-path-risk": [
        "Add capacity to tasks on the critical path",
        "Look for critical tasks that can be parallelized",
        "Check whether critical task durations can be shortened",
    ],
    "long-duration-risk": [
        "Break long-running tasks into smaller subtasks",
        "Add milestone checkpoints",
    ],
    "resource-overallocation-risk": [
        "Rebalance assignments across the team",
        "Consider adding people or outsourcing",
        "Reschedule tasks to avoid assignee conflicts",
    ],
    "technical-complexity-risk": [
        "Assign experienced engineers to high-complexity tasks",
        "Add technical reviews and prototype validation",
        "Consider training or external consulting",
    ],
    "quality-review-risk": [
        "Add review steps to key tasks",
        "Establish code review and testing standards",
        "Run continuous integration with automated tests",
    ],
}


class RiskAnalyzer:
    """
    Derive risk factors and recommendations from an orchestrated plan.

    Example:
        >>> analyzer = RiskAnalyzer()
        >>> assessment = analyzer.assess(tasks, time_info, utilization)
        >>> assessment.overall_risk_level
        4.3
    """

    def assess(
        self,
        tasks: list[Task],
        time_info: dict[str, TaskTimeInfo],
        utilization: list[ResourceUtilization],
    ) -> RiskAssessment:
        """Build a risk assessment; the overall level is the mean factor score."""
        factors: list[RiskFactor] = []
        factors.extend(self._schedule_risks(tasks, time_info))
        factors.extend(self._resource_risks(utilization))
        factors.extend(self._technical_risks(tasks))
        factors.extend(self._quality_risks(tasks))

        overall = sum(f.risk_score for f in factors) / len(factors) if factors else 0.0
        suggestions: list[str] = []
        for factor in factors:
            suggestions.extend(_MITIGATIONS.get(factor.id, []))

        logger.info(f"Risk assessment: {len(factors)} factors, overall level {overall:.1f}")

        return RiskAssessment(
            overall_risk_level=overall,
            risk_factors=factors,
            mitigation_suggestions=suggestions,
            contingency_plans=self.contingency_plans(factors),
        )

    def _schedule_risks(
        self,
        tasks: list[Task],
        time_info: dict[str, TaskTimeInfo],
    ) -> list[RiskFactor]:
        risks: list[RiskFactor] = []

        critical = [t.id for t in tasks if t.id in time_info and time_info[t.id].is_critical]
        if tasks and len(critical) > len(tasks) * CRITICAL_RATIO_RISK:
            risks.append(
                RiskFactor(
                    id="critical-path-risk",
                    name="Critical path risk",
                    description="Too many tasks sit on the critical path; any slip delays the project",
                    probability=0.7,
                    impact=8,
                    risk_score=5.6,
                    affected_task_ids=critical,
                    category=RiskCategory.SCHEDULE,
                )
            )

        long_tasks = [t.id for t in tasks if t.estimated_hours > LONG_TASK_HOURS]
        if long_tasks:
            risks.append(
                RiskFactor(
                    id="long-duration-risk",
                    name="Long task risk",
                    description="Some tasks are estimated above one working week",
                    probability=0.5,
                    impact=6,
                    risk_score=3.0,
                    affected_task_ids=long_tasks,
                    category=RiskCategory.SCHEDULE,
                )
            )

        return risks

    def _resource_risks(self, utilization: list[ResourceUtilization]) -> list[RiskFactor]:
        overallocated = [u for u in utilization if u.overallocation > 0]
        if not overallocated:
            return []

        affected: list[str] = []
        for u in overallocated:
            affected.extend(u.task_ids)

        return [
            RiskFactor(
                id="resource-overallocation-risk",
                name="Resource overallocation risk",
                description=(
                    "Assignees with more work than the project duration: "
                    + ", ".join(u.assignee for u in overallocated)
                ),
                probability=0.8,
                impact=7,
                risk_score=5.6,
                affected_task_ids=affected,
                category=RiskCategory.RESOURCE,
            )
        ]

    def _technical_risks(self, tasks: list[Task]) -> list[RiskFactor]:
        complex_tasks = [t.id for t in tasks if (t.complexity or 0) > HIGH_COMPLEXITY]
        if not complex_tasks:
            return []

        return [
            RiskFactor(
                id="technical-complexity-risk",
                name="Technical complexity risk",
                description="Plan contains high-complexity technical tasks",
                probability=0.6,
                impact=7,
                risk_score=4.2,
                affected_task_ids=complex_tasks,
                category=RiskCategory.TECHNICAL,
            )
        ]

    def _quality_risks(self, tasks: list[Task]) -> list[RiskFactor]:
        unreviewed = [t.id for t in tasks if not t.requires_review]
        if not tasks or len(unreviewed) <= len(tasks) * UNREVIEWED_RATIO:
            return []

        return [
            RiskFactor(
                id="quality-review-risk",
                name="Quality review risk",
                description="Most tasks skip quality review",
                probability=0.4,
                impact=6,
                risk_score=2.4,
                affected_task_ids=unreviewed,
                category=RiskCategory.QUALITY,
            )
        ]

    def contingency_plans(self, factors: list[RiskFactor]) -> list[ContingencyPlan]:
        """
        Prepare a response plan for every factor scoring above 4.0.

        Cost and time are rough sizing from the factor's impact: 1000 per
        impact point and 2 hours per impact point.
        """
        plans: list[ContingencyPlan] = []

        for factor in factors:
            if factor.risk_score <= CONTINGENCY_THRESHOLD:
                continue
            plans.append(
                ContingencyPlan(
                    id=f"contingency-{factor.id}",
                    name=f"{factor.name} contingency plan",
                    description=f"Response plan for {factor.name.lower()}",
                    trigger_conditions=[
                        f"{factor.name} materializes beyond the expected probability",
                        "The schedule shows a clear slip",
                        "Affected tasks are blocked or failing",
                    ],
                    actions=[
                        "Assess the scope of the impact",
                        "Start the risk response process",
                        "Adjust the plan and resource allocation",
                        "Notify stakeholders",
                    ],
                    estimated_cost=factor.impact * 1000,
                    estimated_time=factor.impact * 2,
                )
            )

        return plans

    # =========================================================================
    # RECOMMENDATIONS
    # =========================================================================

    def recommend(
        self,
        tasks: list[Task],
        critical_path: list[str],
        parallel_groups: list[list[str]],
        utilization: list[ResourceUtilization],
        assessment: RiskAssessment,
        split_candidates: list[str],
        warnings: list[ValidationWarning],
        goal: OptimizationGoal,
    ) -> list[str]:
        """Human-readable advice about the plan."""
        recommendations: list[str] = []

        if critical_path:
            recommendations.append(
                f"The critical path has {len(critical_path)} tasks; track them closely"
            )
            if len(critical_path) > len(tasks) * CRITICAL_RATIO_RECOMMENDATION:
                recommendations.append(
                    "A large share of tasks is critical; look for ways to shorten or parallelize them"
                )

        if parallel_groups:
            grouped = sum(len(group) for group in parallel_groups)
            recommendations.append(
                f"{len(parallel_groups)} parallel groups cover {grouped} tasks that can run concurrently"
            )

        over = [u for u in utilization if u.utilization_rate > 1.0]
        if over:
            recommendations.append(
                f"{len(over)} assignees are overallocated; adjust the resource plan"
            )
        under = [u for u in utilization if u.utilization_rate < 0.5]
        if under:
            recommendations.append(
                f"{len(under)} assignees are under 50% utilized; consider reassigning work"
            )

        if assessment.overall_risk_level > HIGH_RISK_LEVEL:
            recommendations.append("Overall risk is high; prepare a detailed risk response plan")

        long_tasks = [t for t in tasks if t.estimated_hours > LONG_TASK_HOURS]
        if long_tasks:
            recommendations.append(
                f"{len(long_tasks)} tasks exceed {LONG_TASK_HOURS:g}h; consider breaking them down"
            )

        if split_candidates:
            recommendations.append(
                f"{len(split_candidates)} tasks are large relative to team capacity "
                f"and were tagged for splitting"
            )

        repaired = [w for w in warnings if w.kind != WarningKind.CANCELLED]
        if repaired:
            recommendations.append(
                f"{len(repaired)} dependency defects were repaired automatically; review the task plan"
            )

        if goal == OptimizationGoal.MINIMIZE_COST and parallel_groups:
            recommendations.append(
                "Cost goal: run parallel groups only where idle capacity already exists"
            )
        elif goal == OptimizationGoal.MAXIMIZE_QUALITY:
            unreviewed = [t for t in tasks if not t.requires_review]
            if unreviewed:
                recommendations.append(
                    f"Quality goal: add reviews to {len(unreviewed)} tasks that skip them"
                )

        return recommendations
