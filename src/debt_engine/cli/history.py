"""Snapshot, history and forecast commands."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..forecast import MIN_SNAPSHOTS, Forecast, ForecastStatus
from ..scoring.models import DebtSnapshot
from . import app
from ._common import console, engine_session, run_analysis, score_style, workspace_option

_STATUS_STYLE = {
    ForecastStatus.INSUFFICIENT_DATA: "dim",
    ForecastStatus.CRITICAL: "bold red",
    ForecastStatus.WARNING: "yellow",
    ForecastStatus.IMPROVING: "green",
    ForecastStatus.STABLE: "cyan",
}


@app.command()
def snapshot(
    ctx: typer.Context,
    workspace: Optional[Path] = workspace_option(),
):
    """
    Analyze the workspace and record the result in the snapshot history.

    Take one snapshot per week to feed [bold]debt-engine forecast[/bold].
    """
    with engine_session(ctx, workspace) as engine:
        run_analysis(engine)
        recorded = engine.take_snapshot()

    console.print(
        f"Recorded snapshot [bold]#{recorded.id}[/bold]: "
        f"score {recorded.composite_score:.1f}, {recorded.file_count} files, "
        f"{recorded.high_debt_count} high debt"
    )


@app.command()
def history(
    ctx: typer.Context,
    workspace: Optional[Path] = workspace_option(),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of snapshots to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List recorded snapshots, newest last.

    [bold cyan]Examples:[/bold cyan]

      debt-engine history

      debt-engine history --limit 5 --json
    """
    with engine_session(ctx, workspace) as engine:
        snapshots = engine.get_snapshots(limit)
        warning = engine.config.warning_threshold
        critical = engine.config.critical_threshold

    if json_output:
        print(json.dumps([s.to_dict() for s in snapshots], indent=2))
        return
    if not snapshots:
        console.print(
            "[yellow]No snapshots recorded yet.[/yellow] "
            "Run [bold]debt-engine snapshot[/bold] first."
        )
        raise typer.Exit(0)

    _output_history(snapshots, warning, critical)


def _output_history(snapshots: list[DebtSnapshot], warning: float, critical: float) -> None:
    table = Table(title="Debt history", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Timestamp", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("High debt", justify="right", style="yellow")
    table.add_column("Commits (7d)", justify="right", style="dim")

    for s in snapshots:
        style = score_style(s.composite_score, warning, critical)
        table.add_row(
            str(s.id),
            s.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"[{style}]{s.composite_score:.1f}[/{style}]",
            str(s.file_count),
            str(s.high_debt_count),
            str(s.commit_count_week),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def forecast(
    ctx: typer.Context,
    workspace: Optional[Path] = workspace_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Project the workspace score four weeks ahead from recent snapshots.
    """
    with engine_session(ctx, workspace) as engine:
        result = engine.forecast()

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
        return
    _output_forecast(result)


def _output_forecast(result: Forecast) -> None:
    style = _STATUS_STYLE[result.status]
    console.print()
    console.print(f"[bold]Status:[/bold] [{style}]{result.status.value}[/{style}]")
    if result.current is not None:
        console.print(f"[bold]Current:[/bold] {result.current:.1f}")
    if result.velocity is not None:
        console.print(
            f"[bold]Velocity:[/bold] {result.velocity.points_per_week:+.2f} points/week "
            f"({result.velocity.direction.value})"
        )
    if not result.has_projection:
        console.print(
            f"[dim]{result.snapshot_count} snapshot(s) recorded; "
            f"at least {MIN_SNAPSHOTS} are needed for a projection.[/dim]"
        )
        console.print()
        return
    projections = "  ".join(
        f"w{week}: {value:.1f}" for week, value in enumerate(result.projections, start=1)
    )
    console.print(f"[bold]Projection:[/bold] {projections}")
    console.print()
