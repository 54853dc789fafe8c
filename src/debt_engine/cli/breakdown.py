"""File command: component breakdown, effort estimate and suggested actions."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..scoring.models import FileBreakdown, FileScore
from ..scoring.roi import EffortEstimate, estimate_effort, suggest_actions
from . import app
from ._common import (
    console,
    engine_session,
    format_component,
    score_file_for,
    score_style,
    supervision_label,
    workspace_option,
)


@app.command("file")
def file_breakdown(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to explain (absolute or workspace-relative)"),
    workspace: Optional[Path] = workspace_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Explain one file's score: each component's contribution, an effort
    estimate and remediation hints.

    [bold cyan]Examples:[/bold cyan]

      debt-engine file src/app.py

      debt-engine file src/app.py -C /path/to/repo --json
    """
    with engine_session(ctx, workspace) as engine:
        score_file_for(engine, path, show_progress=not json_output)
        score = engine.get_file_score(path)
        parts = engine.get_file_breakdown(path)
        warning = engine.config.warning_threshold
        critical = engine.config.critical_threshold

    effort = estimate_effort(score)
    actions = suggest_actions(score.components)

    if json_output:
        payload = parts.to_dict()
        payload["supervision_status"] = score.supervision_status.value
        payload["effort"] = {
            "low_hours": effort.low_hours,
            "high_hours": effort.high_hours,
            "score_reduction": effort.score_reduction,
        }
        payload["actions"] = actions
        print(json.dumps(payload, indent=2))
        return

    _output_rich(score, parts, effort, actions, warning, critical)


def _output_rich(
    score: FileScore,
    parts: FileBreakdown,
    effort: EffortEstimate,
    actions: list[str],
    warning: float,
    critical: float,
) -> None:
    style = score_style(score.composite_score, warning, critical)
    console.print()
    header = f"[bold]{parts.relative_path}[/bold]  [{style}]{parts.composite_score:.1f}[/{style}]"
    label = supervision_label(score.supervision_status)
    if label:
        header += f"  {label}"
    console.print(header)
    console.print(f"[dim]{score.language}, {score.loc} LOC[/dim]")

    table = Table(show_lines=False, pad_edge=True)
    table.add_column("Component")
    table.add_column("Raw", justify="right")
    table.add_column("Weight", justify="right", style="dim")
    table.add_column("Points", justify="right", style="bold")
    table.add_column("Evidence", style="dim")
    for item in parts.components:
        component = item.score
        table.add_row(
            format_component(item.name),
            f"{component.raw_score:.0f}",
            f"{component.weight:.2f}",
            f"{component.contribution:.1f}",
            "; ".join(component.details[:2]),
        )
    console.print(table)

    console.print(
        f"[bold]Estimated effort:[/bold] {effort.low_hours}-{effort.high_hours} hours, "
        f"about {effort.score_reduction} points off the score"
    )
    console.print("[bold]Suggested actions:[/bold]")
    for action in actions:
        console.print(f"  - {action}")
    console.print()
