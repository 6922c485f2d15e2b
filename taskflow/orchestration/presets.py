"""Named orchestration presets and preset recommendation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from taskflow.orchestration.engine import OrchestrationEngine
from taskflow.orchestration.models import OptimizationGoal, SchedulingStrategy


class OrchestrationPreset(str, Enum):
    """Project styles with a tuned configuration."""

    AGILE_SPRINT = "agile_sprint"
    WATERFALL = "waterfall"
    CRITICAL_CHAIN = "critical_chain"
    LEAN_STARTUP = "lean_startup"
    RAPID_PROTOTYPE = "rapid_prototype"
    ENTERPRISE = "enterprise"
    RESEARCH = "research"
    MAINTENANCE = "maintenance"


PRESET_CONFIGS: dict[OrchestrationPreset, dict[str, Any]] = {
    OrchestrationPreset.AGILE_SPRINT: {
        "scheduling_strategy": SchedulingStrategy.RESOURCE_LEVELED,
        "optimization_goal": OptimizationGoal.MAXIMIZE_QUALITY,
        "max_parallel_tasks": 8,
        "buffer_percentage": 0.15,
    },
    OrchestrationPreset.WATERFALL: {
        "scheduling_strategy": SchedulingStrategy.AS_SOON_AS_POSSIBLE,
        "optimization_goal": OptimizationGoal.MAXIMIZE_QUALITY,
        "max_parallel_tasks": 3,
        "buffer_percentage": 0.2,
        "enable_parallel_optimization": False,
    },
    OrchestrationPreset.CRITICAL_CHAIN: {
        "scheduling_strategy": SchedulingStrategy.AS_LATE_AS_POSSIBLE,
        "optimization_goal": OptimizationGoal.MINIMIZE_DURATION,
        "max_parallel_tasks": 6,
        "buffer_percentage": 0.25,
    },
    OrchestrationPreset.LEAN_STARTUP: {
        "scheduling_strategy": SchedulingStrategy.AS_SOON_AS_POSSIBLE,
        "optimization_goal": OptimizationGoal.MINIMIZE_DURATION,
        "max_parallel_tasks": 10,
        "buffer_percentage": 0.05,
        "enable_critical_path": False,
        "enable_resource_leveling": False,
        "enable_risk_analysis": False,
    },
    OrchestrationPreset.RAPID_PROTOTYPE: {
        "scheduling_strategy": SchedulingStrategy.AS_SOON_AS_POSSIBLE,
        "optimization_goal": OptimizationGoal.MINIMIZE_DURATION,
        "max_parallel_tasks": 12,
        "buffer_percentage": 0.05,
        "enable_critical_path": False,
        "enable_resource_leveling": False,
        "enable_risk_analysis": False,
    },
    OrchestrationPreset.ENTERPRISE: {
        "scheduling_strategy": SchedulingStrategy.RESOURCE_LEVELED,
        "optimization_goal": OptimizationGoal.MINIMIZE_COST,
        "max_parallel_tasks": 15,
        "buffer_percentage": 0.2,
    },
    OrchestrationPreset.RESEARCH: {
        "scheduling_strategy": SchedulingStrategy.AS_LATE_AS_POSSIBLE,
        "optimization_goal": OptimizationGoal.MAXIMIZE_QUALITY,
        "max_parallel_tasks": 3,
        "buffer_percentage": 0.3,
        "enable_critical_path": False,
        "enable_parallel_optimization": False,
        "enable_resource_leveling": False,
    },
    OrchestrationPreset.MAINTENANCE: {
        "scheduling_strategy": SchedulingStrategy.RESOURCE_LEVELED,
        "optimization_goal": OptimizationGoal.MINIMIZE_COST,
        "max_parallel_tasks": 6,
        "buffer_percentage": 0.1,
        "enable_critical_path": False,
        "enable_risk_analysis": False,
    },
}

PRESET_DESCRIPTIONS: dict[OrchestrationPreset, tuple[str, str]] = {
    OrchestrationPreset.AGILE_SPRINT: ("Agile sprint", "Iterative delivery with short feedback loops"),
    OrchestrationPreset.WATERFALL: ("Waterfall", "Sequential phases with clear requirements"),
    OrchestrationPreset.CRITICAL_CHAIN: ("Critical chain", "Buffer management under resource constraints"),
    OrchestrationPreset.LEAN_STARTUP: ("Lean startup", "Fast iteration and validation of an MVP"),
    OrchestrationPreset.RAPID_PROTOTYPE: ("Rapid prototype", "Proof of concept built as fast as possible"),
    OrchestrationPreset.ENTERPRISE: ("Enterprise", "Large multi-team projects with governance"),
    OrchestrationPreset.RESEARCH: ("Research", "Exploratory work with high uncertainty"),
    OrchestrationPreset.MAINTENANCE: ("Maintenance", "Bug fixing and operational support"),
}


class ProjectCharacteristics(BaseModel):
    """Inputs for preset recommendation; levels range from 1 to 10."""

    team_size: int = Field(default=5, ge=1)
    project_duration_days: int = Field(default=30, ge=1)
    uncertainty_level: int = Field(default=5, ge=1, le=10)
    quality_requirement: int = Field(default=7, ge=1, le=10)
    time_constraint: int = Field(default=5, ge=1, le=10)
    budget_constraint: int = Field(default=5, ge=1, le=10)
    is_agile: bool = False
    is_research: bool = False
    is_enterprise: bool = False


def preset_config(preset: OrchestrationPreset, **overrides: Any) -> dict[str, Any]:
    """Config values of a preset with overrides applied on top."""
    values = dict(PRESET_CONFIGS[OrchestrationPreset(preset)])
    values.update(overrides)
    return values


def create_engine(preset: OrchestrationPreset | None = None, **overrides: Any) -> OrchestrationEngine:
    """
    Create an engine from a preset.

    Example:
        >>> engine = create_engine(OrchestrationPreset.WATERFALL, team_size=5)
    """
    values = preset_config(preset, **overrides) if preset else dict(overrides)
    return OrchestrationEngine(values)


def available_presets() -> list[dict[str, Any]]:
    """Presets with display names, descriptions and their config."""
    return [
        {
            "preset": preset,
            "name": PRESET_DESCRIPTIONS[preset][0],
            "description": PRESET_DESCRIPTIONS[preset][1],
            "config": dict(PRESET_CONFIGS[preset]),
        }
        for preset in OrchestrationPreset
    ]


def recommend_preset(characteristics: ProjectCharacteristics | None = None) -> OrchestrationPreset:
    """
    Pick a preset from project characteristics.

    Rules are checked in order; the first match wins and AGILE_SPRINT is the
    fallback.
    """
    c = characteristics or ProjectCharacteristics()

    if c.is_enterprise or c.team_size > 20:
        return OrchestrationPreset.ENTERPRISE
    if c.is_research or c.uncertainty_level > 8:
        return OrchestrationPreset.RESEARCH
    if not c.is_agile and c.project_duration_days < 14 and c.time_constraint > 8:
        return OrchestrationPreset.RAPID_PROTOTYPE
    if c.is_agile or (c.time_constraint > 7 and c.project_duration_days < 90):
        return OrchestrationPreset.AGILE_SPRINT
    if c.uncertainty_level > 6 and c.time_constraint > 6 and c.team_size < 10:
        return OrchestrationPreset.LEAN_STARTUP
    if c.quality_requirement < 6 and c.uncertainty_level < 4:
        return OrchestrationPreset.MAINTENANCE
    if c.uncertainty_level < 4 and c.quality_requirement > 8:
        return OrchestrationPreset.WATERFALL
    if c.budget_constraint > 7 or c.team_size > 10:
        return OrchestrationPreset.CRITICAL_CHAIN
    return OrchestrationPreset.AGILE_SPRINT
