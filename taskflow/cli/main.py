"""Main CLI entry point using Typer."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taskflow import __version__
from taskflow.core.config import get_settings
from taskflow.core.errors import ConfigurationError
from taskflow.core.logging_setup import configure_logging
from taskflow.orchestration.engine import OrchestrationEngine
from taskflow.orchestration.models import OrchestrationResult, Task
from taskflow.orchestration.presets import (
    OrchestrationPreset,
    available_presets,
    preset_config,
)

app = typer.Typer(
    name="taskflow",
    help="TaskFlow - dependency-aware task orchestration",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

GANTT_WIDTH = 40


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    GANTT = "gantt"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]TaskFlow[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    TaskFlow - turn a task plan into a schedule.

    Validates dependencies, computes the critical path and finds tasks
    that can run in parallel.
    """
    try:
        settings = get_settings()
    except ValidationError as exc:
        console.print(f"[bold red]Invalid settings: {escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)
    configure_logging(settings)


def load_plan(path: Path) -> list[Task]:
    """
    Read tasks from a JSON plan file.

    The file holds either a list of tasks or an object with a ``tasks`` key.

    Raises:
        ValueError: If the file does not look like a plan.
        ValidationError: If a task is malformed.
    """
    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list):
        raise ValueError("plan must be a list of tasks or an object with a 'tasks' list")
    return [Task.model_validate(item) for item in data]


@app.command()
def orchestrate(
    plan: Path = typer.Argument(..., help="Path to a JSON task plan"),
    preset: OrchestrationPreset | None = typer.Option(
        None,
        "--preset",
        "-p",
        help="Start from a named preset",
    ),
    strategy: str | None = typer.Option(
        None,
        "--strategy",
        "-s",
        help="as_soon_as_possible, as_late_as_possible or resource_leveled",
    ),
    goal: str | None = typer.Option(
        None,
        "--goal",
        "-g",
        help="minimize_duration, minimize_cost or maximize_quality",
    ),
    max_parallel: int | None = typer.Option(
        None,
        "--max-parallel",
        "-m",
        help="Maximum tasks per parallel group",
    ),
    buffer: float | None = typer.Option(
        None,
        "--buffer",
        "-b",
        help="Schedule buffer as a fraction (0-1)",
    ),
    team_size: int | None = typer.Option(
        None,
        "--team-size",
        "-t",
        help="People available for the workload balancer",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Seconds allowed for redundant-dependency pruning",
    ),
    critical_path: bool | None = typer.Option(
        None,
        "--critical-path/--no-critical-path",
        help="Run critical path analysis",
    ),
    parallel: bool | None = typer.Option(
        None,
        "--parallel/--no-parallel",
        help="Find parallel groups",
    ),
    resource_leveling: bool | None = typer.Option(
        None,
        "--resource-leveling/--no-resource-leveling",
        help="Run the workload balancer",
    ),
    risk: bool | None = typer.Option(
        None,
        "--risk/--no-risk",
        help="Run risk analysis",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format",
    ),
) -> None:
    """
    Orchestrate a task plan.

    Example:
        taskflow orchestrate plan.json --preset waterfall --output gantt
    """
    try:
        tasks = load_plan(plan)
    except (OSError, ValueError, ValidationError) as exc:
        console.print(
            f"[bold red]Could not load plan {escape(str(plan))}: {escape(str(exc))}[/bold red]"
        )
        raise typer.Exit(code=1)

    options: dict[str, Any] = {
        "scheduling_strategy": strategy,
        "optimization_goal": goal,
        "max_parallel_tasks": max_parallel,
        "buffer_percentage": buffer,
        "team_size": team_size,
        "pruning_timeout": timeout,
        "enable_critical_path": critical_path,
        "enable_parallel_optimization": parallel,
        "enable_resource_leveling": resource_leveling,
        "enable_risk_analysis": risk,
    }
    overrides = {key: value for key, value in options.items() if value is not None}
    config = preset_config(preset, **overrides) if preset else overrides

    engine = OrchestrationEngine(config)
    try:
        result = engine.orchestrate(tasks)
    except ConfigurationError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    if output == OutputFormat.JSON:
        typer.echo(result.model_dump_json(indent=2))
    elif output == OutputFormat.GANTT:
        _print_gantt(result)
    else:
        _print_table(result)


@app.command()
def presets() -> None:
    """
    List available orchestration presets.
    """
    table = Table(title="Orchestration Presets")
    table.add_column("Preset", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Strategy")
    table.add_column("Max Parallel", justify="right")

    for entry in available_presets():
        config = entry["config"]
        table.add_row(
            entry["preset"].value,
            entry["name"],
            entry["description"],
            config["scheduling_strategy"].value,
            str(config["max_parallel_tasks"]),
        )

    console.print(table)


# =============================================================================
# RENDERING
# =============================================================================


def _print_table(result: OrchestrationResult) -> None:
    stats = result.stats()
    console.print(
        Panel(
            f"[bold]Tasks:[/bold] {stats['total_tasks']}\n"
            f"[bold]Duration:[/bold] {result.total_duration:g}h "
            f"({result.buffered_duration:g}h with buffer)\n"
            f"[bold]Critical path:[/bold] {escape(' -> '.join(result.critical_path)) or '-'}\n"
            f"[bold]Parallel groups:[/bold] {stats['parallel_groups']}\n"
            f"[bold]Risk level:[/bold] {result.risk_assessment.overall_risk_level:.1f}",
            title="[bold blue]TaskFlow[/bold blue]",
            border_style="yellow" if result.incomplete else "blue",
        )
    )

    if result.time_info:
        table = Table(title="Schedule")
        table.add_column("Task", style="cyan")
        table.add_column("Duration", justify="right")
        table.add_column("ES", justify="right")
        table.add_column("EF", justify="right")
        table.add_column("LS", justify="right")
        table.add_column("LF", justify="right")
        table.add_column("Float", justify="right")
        table.add_column("Critical")

        for tid in result.execution_order:
            info = result.time_info[tid]
            table.add_row(
                escape(tid),
                f"{info.duration:g}",
                f"{info.earliest_start:g}",
                f"{info.earliest_finish:g}",
                f"{info.latest_start:g}",
                f"{info.latest_finish:g}",
                f"{info.total_float:g}",
                "[red]yes[/red]" if info.is_critical else "",
            )
        console.print(table)
    else:
        console.print(f"[bold]Execution order:[/bold] {escape(', '.join(result.execution_order))}")

    for i, group in enumerate(result.parallel_groups, start=1):
        console.print(f"  Group {i}: {escape(', '.join(group))}")

    if result.warnings:
        console.print("\n[bold yellow]Warnings[/bold yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]{escape(str(warning))}[/yellow]")

    if result.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for recommendation in result.recommendations:
            console.print(f"  - {escape(recommendation)}")


def _print_gantt(result: OrchestrationResult) -> None:
    if not result.time_info or result.total_duration <= 0:
        console.print("[yellow]No timings available; enable critical path analysis[/yellow]")
        return

    scale = GANTT_WIDTH / result.total_duration
    label_width = max(len(tid) for tid in result.time_info)

    for tid in result.execution_order:
        info = result.time_info[tid]
        offset = round(info.earliest_start * scale)
        length = max(1, round(info.duration * scale))
        bar = " " * offset + ("#" if info.is_critical else "=") * length
        console.print(
            f"{tid:<{label_width}} |{bar:<{GANTT_WIDTH}}| {info.earliest_start:g}-{info.earliest_finish:g}h",
            markup=False,
            highlight=False,
        )


if __name__ == "__main__":
    app()
