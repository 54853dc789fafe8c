"""Analyze command: full workspace run and ranked file table."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..scoring.models import AnalysisResult
from ..scoring.result import breakdown
from . import app
from ._common import (
    console,
    engine_session,
    format_component,
    run_analysis,
    score_style,
    supervision_label,
)


@app.command()
def analyze(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(
        None,
        help="Repository root (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    top: int = typer.Option(
        20,
        "--top",
        "-n",
        help="Number of files to list",
        min=1,
        max=1000,
    ),
    snapshot: bool = typer.Option(
        False,
        "--snapshot",
        help="Record the result in .debtengine/history.db for forecasting",
    ),
):
    """
    Score every source file and list the highest-debt files.

    [bold cyan]Examples:[/bold cyan]

      debt-engine analyze

      debt-engine analyze /path/to/repo --top 10

      debt-engine analyze --json --snapshot
    """
    with engine_session(ctx, path) as engine:
        result = run_analysis(engine, show_progress=not json_output)
        recorded = engine.take_snapshot() if snapshot else None
        critical = engine.config.critical_threshold

    if json_output:
        payload = result.to_dict()
        payload["files"] = payload["files"][:top]
        if recorded is not None:
            payload["snapshot_id"] = recorded.id
        print(json.dumps(payload, indent=2))
        return

    _output_rich(result, top, critical)
    if recorded is not None:
        console.print(f"[dim]Recorded snapshot #{recorded.id}[/dim]")


def _output_rich(result: AnalysisResult, top: int, critical: float) -> None:
    warning = result.warning_threshold
    style = score_style(result.workspace_score, warning, critical)
    console.print()
    console.print(
        f"[bold]Workspace debt:[/bold] [{style}]{result.workspace_score:.1f}[/{style}]  "
        f"[dim]{result.file_count} files, {result.high_debt_count} above {warning:g}, "
        f"{result.duration_ms / 1000:.1f}s[/dim]"
    )
    if not result.files:
        console.print("[yellow]No source files found.[/yellow]")
        return

    table = Table(show_lines=False, pad_edge=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Top driver")
    table.add_column("LOC", justify="right", style="dim")
    table.add_column("", no_wrap=True)

    for rank, score in enumerate(result.ranked()[:top], start=1):
        driver = breakdown(score).components[0]
        s = score_style(score.composite_score, warning, critical)
        table.add_row(
            str(rank),
            score.relative_path,
            f"[{s}]{score.composite_score:.1f}[/{s}]",
            f"{format_component(driver.name)} ({driver.score.raw_score:.0f})",
            str(score.loc),
            supervision_label(score.supervision_status),
        )

    console.print(table)
    if result.file_count > top:
        console.print(f"[dim]... and {result.file_count - top} more files[/dim]")
    console.print()
