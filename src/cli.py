"""
Command-line interface for the climbing metrics engine.

Provides commands for:
- Readiness, load ratio and recommendation from a session history file
- Per-session statistics
- Readiness projection over additional rest
- Grade conversion tables
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from src.config import get_settings
from src.engine import MetricsEngine, build_context
from src.grades import GradeSystem, V_GRADES, v_to_font
from src.history_io import load_history_file
from src.projection import ReadinessProjector
from src.report import MetricsReportBuilder
from src.schemas import (
    LoadMetric,
    LoadZone,
    MetricsBundle,
    ReadinessZone,
)
from src.session_stats import SessionStats, calculate_stats_for_session

# Initialize Typer app and Rich console
app = typer.Typer(
    help="Climbing Readiness - training readiness, load ratio and recommendations"
)
console = Console()

ZONE_COLORS = {
    ReadinessZone.OPTIMAL: "green",
    ReadinessZone.BALANCED: "yellow",
    ReadinessZone.LIMITED: "red",
    LoadZone.LOW: "cyan",
    LoadZone.OPTIMAL: "green",
    LoadZone.ELEVATED: "yellow",
    LoadZone.HIGH: "red",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


def _load_context(sessions: Path, now: Optional[int]):
    """Load a history file into a SessionContext, exiting on failure."""
    try:
        history = load_history_file(sessions)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗ Failed to load sessions: {e}[/red]")
        raise typer.Exit(1)

    context, skipped = build_context(
        history.sessions,
        now if now is not None else _now_ms(),
        user_id=history.user_id,
        counts=history.counts,
    )
    console.print(
        f"✓ Loaded [green]{len(context.sessions)}[/green] sessions"
        + (f" ([yellow]{skipped} records skipped[/yellow])" if skipped else "")
    )
    return context, skipped


# ===== DISPLAY HELPER FUNCTIONS =====


def _display_bundle(bundle: MetricsBundle):
    """
    Display readiness, load ratio and recommendation.

    Args:
        bundle: MetricsBundle from the engine
    """
    readiness = bundle.readiness
    if readiness.score is None:
        console.print(f"\n[bold]Readiness: --[/bold] ({readiness.message})")
    else:
        color = ZONE_COLORS[readiness.zone]
        console.print(
            f"\n[bold]Readiness: [{color}]{readiness.score}[/{color}] "
            f"({readiness.zone.value})[/bold] - {readiness.status.value}, "
            f"confidence {readiness.confidence:.0%}"
        )
        console.print(f"  {readiness.message}")

        table = Table(title="Readiness Breakdown", box=box.ROUNDED)
        table.add_column("Factor", style="cyan")
        table.add_column("Score", justify="right", style="yellow")
        for factor, value in readiness.breakdown.items():
            table.add_row(factor.replace("_", " ").title(), f"{value:.1f}")
        console.print(table)

    load = bundle.load_ratio
    if not load.available or load.ratio is None:
        console.print(f"\n[bold]Load Ratio: --[/bold] ({load.message or 'needs more sessions'})")
    else:
        color = ZONE_COLORS[load.zone]
        console.print(
            f"\n[bold]Load Ratio: [{color}]{load.ratio:.2f}[/{color}] ({load.zone.value})[/bold]"
        )
        console.print(f"  {load.message}")

    rec = bundle.recommendation
    console.print(f"\n[bold]Recommended Training: {rec.type}[/bold]")
    console.print(f"  Focus: {rec.focus}")
    if rec.target_volume:
        console.print(f"  Volume: {rec.target_volume} climbs")
    if rec.target_rpe:
        console.print(f"  Effort: RPE {rec.target_rpe}")
    if rec.warning:
        console.print(f"  [red]⚠ {rec.warning}[/red]")


def _display_session_stats(stats: SessionStats):
    """Display one session's distributions and headline numbers."""
    console.print(
        f"\n[bold]{stats.climb_count} climbs[/bold] - median {stats.median_grade or '--'}, "
        f"peak {stats.peak_grade or '--'}, avg RPE {stats.average_rpe:.1f}, "
        f"flash rate {stats.flash_rate}%, {stats.total_xp} XP"
    )
    distributions = (
        ("Grades", stats.grades),
        ("Styles", stats.styles),
        ("Angles", stats.angles),
        ("Types", stats.types),
    )
    for title, entries in distributions:
        table = Table(title=title, box=box.SIMPLE)
        table.add_column("Label", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("%", justify="right", style="yellow")
        for entry in entries:
            table.add_row(entry.label, str(entry.count), str(entry.percent))
        console.print(table)


# ===== CLI COMMANDS =====


@app.command()
def metrics(
    sessions: Path = typer.Option(
        ...,
        "--sessions",
        "-s",
        help="Path to session history JSON file",
        exists=True,
    ),
    now: Optional[int] = typer.Option(
        None,
        "--now",
        help="Reference instant in ms since epoch (defaults to the current time)",
    ),
    load_metric: Optional[LoadMetric] = typer.Option(
        None,
        "--load-metric",
        "-l",
        help="Load scalar for the load ratio",
    ),
    save_report: bool = typer.Option(
        False,
        "--save-report/--no-report",
        help="Save metrics report to file",
    ),
    report_format: str = typer.Option(
        "json",
        "--report-format",
        "-f",
        help="Report output format (json or markdown)",
    ),
):
    """
    Compute readiness, load ratio and a training recommendation.
    """
    console.print("\n[bold cyan]Climbing Readiness[/bold cyan]\n")
    settings = get_settings()

    context, skipped = _load_context(sessions, now)
    engine = MetricsEngine(load_metric=load_metric or settings.DEFAULT_LOAD_METRIC)
    bundle = engine.compute(context, skipped_records=skipped)

    _display_bundle(bundle)

    if save_report:
        try:
            path = MetricsReportBuilder(bundle).save_to_file(settings.REPORT_DIR, format=report_format)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)
        console.print(f"\n✓ Report saved: [cyan]{path}[/cyan]")
    console.print()


@app.command()
def stats(
    sessions: Path = typer.Option(
        ...,
        "--sessions",
        "-s",
        help="Path to session history JSON file",
        exists=True,
    ),
    index: int = typer.Option(
        0,
        "--index",
        "-i",
        help="Session to show, 0 = most recent",
    ),
):
    """
    Show statistics for one logged session.
    """
    context, _ = _load_context(sessions, None)
    ordered = sorted(
        (s for s in context.sessions if not s.is_degenerate),
        key=lambda s: s.timestamp,
        reverse=True,
    )
    if not 0 <= index < len(ordered):
        console.print(f"[red]✗ No session at index {index} ({len(ordered)} sessions loaded)[/red]")
        raise typer.Exit(1)

    _display_session_stats(calculate_stats_for_session(ordered[index]))


@app.command()
def project(
    sessions: Path = typer.Option(
        ...,
        "--sessions",
        "-s",
        help="Path to session history JSON file",
        exists=True,
    ),
    hours: List[float] = typer.Option(
        [0, 12, 24, 36, 48, 72],
        "--hours",
        help="Additional rest (hours) to project; repeat for several values",
    ),
    now: Optional[int] = typer.Option(None, "--now", help="Reference instant (ms since epoch)"),
):
    """
    Project readiness over additional rest ("what-if I rest longer?").
    """
    context, _ = _load_context(sessions, now)
    projector = ReadinessProjector(context)

    try:
        points = projector.project_rest(hours)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Readiness Projection", box=box.ROUNDED)
    table.add_column("Rest (h)", justify="right", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Zone")
    for point in points:
        zone = point.zone.value if point.zone else point.status.value
        score = str(point.score) if point.score is not None else "--"
        table.add_row(f"{point.rest_hours:g}", score, zone)
    console.print(table)

    to_optimal = projector.hours_until_zone(ReadinessZone.OPTIMAL)
    if to_optimal is None:
        console.print("Optimal zone not reached within 96 hours of rest.")
    else:
        console.print(f"Optimal zone after [green]{to_optimal}[/green] hours of rest.")


@app.command()
def grades(
    system: GradeSystem = typer.Option(
        GradeSystem.V_SCALE,
        "--system",
        help="Grade system to list first",
    ),
):
    """
    Show the V-scale / Font grade conversion table.
    """
    table = Table(title="Grade Conversion", box=box.ROUNDED)
    columns = ["V-Scale", "Font"] if system == GradeSystem.V_SCALE else ["Font", "V-Scale"]
    for column in columns:
        table.add_column(column)
    for v_grade in V_GRADES:
        row = [v_grade, v_to_font(v_grade)]
        table.add_row(*(row if system == GradeSystem.V_SCALE else reversed(row)))
    console.print(table)


if __name__ == "__main__":
    app()
