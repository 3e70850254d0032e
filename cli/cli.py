"""CLI for FitCoach plan generation.

Developer CLI that runs the same pipeline code path as production:
generate meal/workout plans from a GenerationRequest JSON file, inspect
the rendered prompts, and re-validate saved provider responses.
"""

import asyncio
import json
import sys
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fitcoach.config.settings import settings
from fitcoach.core import observe
from fitcoach.core.logger import setup_logger
from fitcoach.core.telemetry import RecordingTelemetry
from fitcoach.planning.errors import PlanGenerationError, PlanValidationError
from fitcoach.planning.llm.prompts import build_plan_prompt
from fitcoach.planning.pipeline import PlanGenerationPipeline, user_facing_message
from fitcoach.planning.request import GenerationRequest, Language, PlanKind
from fitcoach.planning.validation import ValidationOutcome, validate_meal_plan, validate_workout_plan
from fitcoach.plans.history import build_plan_record

# Initialize Rich console for output
console = Console()

# Initialize Typer app
app = typer.Typer(
    name="fitcoach-cli",
    help="FitCoach CLI - AI meal and workout plan generation",
    add_completion=False,
)


class KindOption(StrEnum):
    MEAL = "meal"
    WORKOUT = "workout"


def _setup_logging(debug: bool = False) -> None:
    """Set up logging with console and optional file output.

    Args:
        debug: Enable debug logging level
    """
    log_level = "DEBUG" if debug else settings.log_level
    setup_logger(level=log_level, log_file=settings.log_file or None)


def _load_request(
    request_file: Path,
    language: Language | None,
    duration: int | None,
) -> GenerationRequest:
    """Read a GenerationRequest JSON file, applying CLI overrides."""
    try:
        data = json.loads(request_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] Could not read request file {request_file}: {e}")
        raise typer.Exit(1) from e

    if language is not None:
        data["language"] = language.value
    if duration is not None:
        data["plan_duration_days"] = duration

    try:
        return GenerationRequest.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid generation request in {request_file}")
        console.print(str(e), markup=False)
        raise typer.Exit(1) from e


def _format_document(document: dict, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(document, indent=2, ensure_ascii=False)
    return json.dumps(document, ensure_ascii=False)


def _print_issues(outcome: ValidationOutcome) -> None:
    table = Table(title=f"{len(outcome.issues)} validation issue(s)")
    table.add_column("Path", style="cyan")
    table.add_column("Issue", style="red")
    table.add_column("Code", style="dim")
    for issue in outcome.issues:
        table.add_row(Text(issue.path), Text(issue.message), Text(issue.code))
    console.print(table)


@app.command()
def generate(
    kind: KindOption = typer.Argument(..., help="Plan type to generate"),
    request_file: Path = typer.Option(..., "--request", "-r", exists=True, dir_okay=False, help="GenerationRequest JSON file"),
    language: Language | None = typer.Option(None, "--language", "-l", help="Override the request language"),
    duration: int | None = typer.Option(None, "--duration", "-d", min=1, help="Override plan duration in days"),
    output_file: Path | None = typer.Option(None, "--output", "-o", help="Write the plan record JSON here"),
    show_telemetry: bool = typer.Option(False, "--show-telemetry", help="Print telemetry events after the run"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging (includes prompts)"),
) -> None:
    """Generate a meal or workout plan through the full pipeline."""
    _setup_logging(debug)
    observe.init(enabled=settings.observe_enabled)

    request = _load_request(request_file, language, duration)
    telemetry = RecordingTelemetry() if show_telemetry else None
    pipeline = PlanGenerationPipeline(telemetry=telemetry)
    plan_kind = PlanKind(kind.value)

    console.print(
        f"[yellow]Generating {request.plan_duration_days}-day {plan_kind.value} plan "
        f"({request.language.value}) for {request.profile.id}...[/yellow]"
    )
    try:
        generated = asyncio.run(pipeline.generate(request, plan_kind))
    except PlanValidationError as e:
        logger.error("Generated plan failed validation", issue_count=len(e.issues))
        console.print(f"[red]{user_facing_message(e, request.language)}[/red]")
        _print_issues(ValidationOutcome.invalid(e.issues))
        raise typer.Exit(1) from e
    except PlanGenerationError as e:
        logger.error("Plan generation failed", error_type=type(e).__name__)
        console.print(f"[red]{user_facing_message(e, request.language)}[/red]")
        console.print(f"[dim]{type(e).__name__}: {e}[/dim]")
        raise typer.Exit(1) from e
    finally:
        if isinstance(telemetry, RecordingTelemetry):
            console.print(Panel(", ".join(telemetry.names()) or "(none)", title="Telemetry events"))

    record = build_plan_record(request, generated)
    document = _format_document(record.to_row())

    console.print(
        f"[green]Plan ready:[/green] {len(generated.plan.weekly_plan)} days, "
        f"{generated.attempts} attempt(s), {generated.usage.total_tokens} tokens ({generated.model_name})"
    )
    if output_file:
        output_file.write_text(document, encoding="utf-8")
        console.print(f"[green]Plan written to {output_file}[/green]")
    else:
        console.print(JSON(document))


@app.command()
def prompt(
    kind: KindOption = typer.Argument(..., help="Plan type"),
    request_file: Path = typer.Option(..., "--request", "-r", exists=True, dir_okay=False, help="GenerationRequest JSON file"),
    language: Language | None = typer.Option(None, "--language", "-l", help="Override the request language"),
) -> None:
    """Render the system and user prompts without calling the provider."""
    request = _load_request(request_file, language, None)
    pair = build_plan_prompt(request, PlanKind(kind.value))
    console.print(Panel(Text(pair.system), title="System prompt", expand=False))
    console.print(Panel(Text(pair.user), title="User prompt", expand=False))


@app.command()
def validate(
    kind: KindOption = typer.Argument(..., help="Plan type"),
    response_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved provider response (JSON, may be fenced)"),
) -> None:
    """Re-validate a saved provider response and list every issue."""
    raw = response_file.read_text(encoding="utf-8")
    validator = validate_meal_plan if kind == KindOption.MEAL else validate_workout_plan
    outcome = validator(raw)

    if outcome.is_valid:
        console.print(f"[green]Valid {kind.value} plan[/green] ({len(outcome.plan.weekly_plan)} days)")
        return

    _print_issues(outcome)
    raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show the effective generation configuration (secrets redacted)."""
    table = Table(title=f"FitCoach configuration ({datetime.now(UTC):%Y-%m-%d %H:%M} UTC)")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        shown = ("***" if value else "(unset)") if name.endswith("api_key") else str(value)
        table.add_row(name, shown)
    console.print(table)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
