"""Supervise command: accept a file's current debt or withdraw acceptance."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console, engine_session, score_file_for, workspace_option


@app.command()
def supervise(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to accept (absolute or workspace-relative)"),
    workspace: Optional[Path] = workspace_option(),
    note: str = typer.Option("", "--note", help="Why the debt is acceptable"),
    remove: bool = typer.Option(False, "--remove", help="Withdraw a previous acceptance"),
):
    """
    Mark a file's current score as accepted.

    The file is reported as [green]accepted[/green] while its score stays
    within 5 points of the accepted value, and as [red]regressed[/red] once
    it rises further.
    """
    with engine_session(ctx, workspace) as engine:
        score_file_for(engine, path)
        if remove:
            score = engine.unsupervise_file(path)
            console.print(f"Removed acceptance for [cyan]{score.relative_path}[/cyan]")
            return
        score = engine.supervise_file(path, note)

    console.print(
        f"Accepted [cyan]{score.relative_path}[/cyan] at "
        f"[bold]{score.composite_score:.1f}[/bold]"
    )
