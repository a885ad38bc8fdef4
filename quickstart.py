#!/usr/bin/env python3
"""
Quick start script to demonstrate the climbing readiness engine.

This script shows the complete workflow:
1. Load a session history
2. Compute readiness, load ratio and a recommendation
3. Summarise the most recent session
4. Project readiness over additional rest
5. Save a metrics report
"""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.engine import MetricsEngine, build_context
from src.history_io import load_history_file
from src.projection import ReadinessProjector
from src.report import MetricsReportBuilder
from src.schemas import Climb, Session
from src.session_stats import calculate_stats_for_session
from src.thresholds import MS_PER_HOUR

# Snapshot instant of the sample history (2023-11-14 22:13:20 UTC)
DEMO_NOW = 1_700_000_000_000

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🧗 Climbing Readiness[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Load Session History =====
    print_header("Step 1: Load Session History")

    history = load_history_file(Path("tests/fixtures/sample_history.json"))
    context, skipped = build_context(
        history.sessions, DEMO_NOW, user_id=history.user_id, counts=history.counts
    )

    console.print(f"✓ Loaded: [green]{history.user_id}[/green]")
    console.print(f"  Sessions: {len(context.sessions)}")
    console.print(f"  Records skipped: {skipped}")

    # ===== STEP 2: Compute Metrics =====
    print_header("Step 2: Compute Metrics")

    engine = MetricsEngine()
    bundle = engine.compute(context, skipped_records=skipped)

    table = Table(title="Readiness Breakdown", box=box.ROUNDED)
    table.add_column("Factor", style="cyan")
    table.add_column("Score", justify="right", style="yellow")
    for factor, value in bundle.readiness.breakdown.items():
        table.add_row(factor.replace("_", " ").title(), f"{value:.1f}")
    console.print(table)

    for line in bundle.summary_lines():
        console.print(f"  • {line}")
    if bundle.recommendation.warning:
        console.print(f"  [red]⚠ {bundle.recommendation.warning}[/red]")

    # ===== STEP 3: Latest Session =====
    print_header("Step 3: Latest Session")

    latest = max((s for s in context.sessions if not s.is_degenerate), key=lambda s: s.timestamp)
    stats = calculate_stats_for_session(latest)
    console.print(f"  Climbs: {stats.climb_count}, median {stats.median_grade}, peak {stats.peak_grade}")
    console.print(f"  Flash rate: {stats.flash_rate}%, XP: {stats.total_xp}")
    console.print(f"  Dominant style: {stats.dominant_style}")

    # ===== STEP 4: What-if Analysis =====
    print_header("Step 4: What-if Analysis")

    projector = ReadinessProjector(context, engine=engine)
    for point in projector.project_rest([0, 24, 48]):
        console.print(f"  +{point.rest_hours:g}h rest: {point.score} ({point.zone.value})")

    hard_session = Session(
        start_time=DEMO_NOW - 2 * MS_PER_HOUR,
        end_time=DEMO_NOW - MS_PER_HOUR,
        climbs=tuple(Climb(grade="V5", style="POWERFUL", rpe=9, attempts=3) for _ in range(8)),
    )
    scenario = projector.with_session(hard_session)
    console.print("\n[bold]Scenario: one more hard session today[/bold]")
    console.print(f"  Readiness: {scenario.original_score} → {scenario.new_score}")
    console.print(f"  Load ratio: {scenario.original_load_ratio} → {scenario.new_load_ratio}")
    console.print(f"  New recommendation: {scenario.new_recommendation.type}")

    # ===== STEP 5: Save Report =====
    print_header("Step 5: Save Report")

    report_path = MetricsReportBuilder(bundle).save_to_file(Path("metrics_reports"), format="markdown")
    console.print(f"✓ Report saved to: [cyan]{report_path}[/cyan]")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The engine successfully:\n"
        "  1. Validated a session history\n"
        "  2. Scored readiness and load\n"
        "  3. Recommended the next session\n"
        "  4. Projected readiness over rest",
        title="[bold green]Success[/bold green]",
        border_style="green",
    )
    console.print(panel)

    console.print("\n[bold cyan]Next Steps:[/bold cyan]")
    console.print("  • Run CLI: python3 -m src.cli metrics --sessions <history.json>")
    console.print("  • Start API: python3 -m src.api.main")
    console.print("  • Run tests: python3 -m pytest\n")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print("\n[dim]Make sure you're in the project root directory[/dim]")
        console.print("[dim]and have installed dependencies: pip install -e .[/dim]")
        raise
