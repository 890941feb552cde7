"""CLI commands for instantiating and analysing multi-agent execution plans."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer

from .config import DEFAULT_CONFIG_NAME, EngineSettings, load_settings
from .errors import ConfigError, PlanFileError, TemplateNotFoundError
from .plan.schema import Plan
from .planning import (
    TemplateRegistry,
    calculate_critical_path,
    create_plan_from_template,
    default_registry,
    dump_plan,
    export_plan_to_markdown,
    get_executable_tasks,
    lint_plan,
    load_plan,
    plan_execution_waves,
    validate_plan,
)

APP_HELP = "Multi-agent execution plan engine."

app = typer.Typer(help=APP_HELP)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity at DEBUG level."),
) -> None:
    """Analyse plans built from reusable multi-agent templates."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_settings(config: str) -> EngineSettings:
    try:
        settings = load_settings(Path(config))
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error
    logging.basicConfig(level=settings.logging.level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _build_registry(settings: EngineSettings) -> TemplateRegistry:
    return default_registry(settings.resolve_template_paths())


def _load_plan(plan_file: Path) -> Plan:
    try:
        return load_plan(plan_file)
    except PlanFileError as error:
        typer.echo(f"Failed to load plan: {error}")
        raise typer.Exit(code=1) from error


@app.command()
def templates(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """List the registered plan templates."""
    registry = _build_registry(_load_settings(config))
    entries = registry.get_available_templates()
    if not entries:
        typer.echo("No templates registered.")
        return
    for template_id, entry in entries.items():
        template = entry.template
        typer.echo(
            f"- {template_id} [{entry.category}] {entry.name} v{template.version}: "
            f"{len(template.team_roster)} agent(s), {len(template.task_breakdown)} task(s)"
        )
        if entry.description:
            typer.echo(f"    {entry.description}")


@app.command()
def create(
    template_id: str = typer.Argument(..., help="Identifier of the template to instantiate."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the plan (.json, .yaml or .yml). Defaults to <plan id>.json.",
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Override the plan name."),
    description: Optional[str] = typer.Option(None, "--description", help="Override the plan description."),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """Instantiate a plan from a registered template."""
    registry = _build_registry(_load_settings(config))
    try:
        template = registry.require_template(template_id)
    except TemplateNotFoundError as error:
        available = ", ".join(registry) or "none"
        raise typer.BadParameter(f"{error} (available: {available})") from error

    overrides: Dict[str, str] = {}
    if name:
        overrides["name"] = name
    if description:
        overrides["description"] = description
    plan = create_plan_from_template(template, overrides or None)

    target = dump_plan(plan, output or Path(f"{plan.id}.json"))
    typer.echo(f"Created plan {plan.id} from template '{template_id}'.")
    typer.echo(f"Wrote {target.as_posix()}")


@app.command()
def validate(
    plan_file: Path = typer.Argument(..., help="Plan file to validate."),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """Check structural integrity; exits with code 1 when the plan is invalid."""
    _load_settings(config)
    plan = _load_plan(plan_file)
    result = validate_plan(plan)
    findings = lint_plan(plan)

    if result.valid:
        typer.echo(f"Plan {plan.id} is valid.")
    else:
        typer.echo(f"Plan {plan.id} is invalid ({len(result.errors)} error(s)):")
        for error in result.errors:
            typer.echo(f"  - {error}")
    if findings:
        typer.echo("Warnings:")
        for finding in findings:
            typer.echo(f"  - {finding}")
    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def ready(
    plan_file: Path = typer.Argument(..., help="Plan file to inspect."),
    completed: List[str] = typer.Option(
        None,
        "--completed",
        help="Identifier of a completed task. Repeatable.",
    ),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """List tasks whose dependencies are all complete."""
    _load_settings(config)
    plan = _load_plan(plan_file)
    done = set(completed or [])
    known = {task.id for task in plan.task_breakdown}
    unknown = sorted(done - known)
    if unknown:
        typer.echo(f"Warning: ignoring unknown task id(s): {', '.join(unknown)}")

    tasks = get_executable_tasks(plan.task_breakdown, done)
    if not tasks:
        if known and known <= done:
            typer.echo("All tasks completed.")
        else:
            typer.echo("No tasks are ready.")
        return
    typer.echo("Ready tasks:")
    for task in tasks:
        typer.echo(f"- {task.id}: {task.name} (owner: {task.owner})")


@app.command()
def critical_path(
    plan_file: Path = typer.Argument(..., help="Plan file to analyse."),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """Print the longest timeout-weighted dependency chain."""
    settings = _load_settings(config)
    plan = _load_plan(plan_file)
    result = calculate_critical_path(
        plan.task_breakdown,
        default_timeout=settings.engine.default_task_timeout,
    )
    if not result.path:
        typer.echo("Plan has no tasks.")
        return
    typer.echo(f"Critical path: {' -> '.join(result.path)}")
    typer.echo(f"Duration: {result.duration_seconds} seconds")


@app.command()
def waves(
    plan_file: Path = typer.Argument(..., help="Plan file to analyse."),
    max_concurrency: Optional[int] = typer.Option(
        None,
        "--max-concurrency",
        min=1,
        help="Tasks per wave. Defaults to the config value, then the plan's own limit.",
    ),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """Group tasks into rounds an executor could dispatch together."""
    settings = _load_settings(config)
    plan = _load_plan(plan_file)
    limit = (
        max_concurrency
        or settings.engine.max_concurrency
        or plan.orchestration_and_timeline.concurrency_plan.max_concurrency
    )
    result = plan_execution_waves(plan.task_breakdown, limit)
    for index, wave in enumerate(result.waves, start=1):
        typer.echo(f"Wave {index}: {', '.join(wave)}")
    if result.blocked:
        typer.echo(f"Blocked: {', '.join(result.blocked)}")
        raise typer.Exit(code=1)


@app.command()
def export(
    plan_file: Path = typer.Argument(..., help="Plan file to render."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the Markdown report here instead of stdout.",
    ),
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the engine configuration file.",
    ),
) -> None:
    """Render a plan as a Markdown report."""
    _load_settings(config)
    plan = _load_plan(plan_file)
    markdown = export_plan_to_markdown(plan)
    if output is None:
        typer.echo(markdown, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    typer.echo(f"Wrote {output.as_posix()}")


if __name__ == "__main__":
    app()
