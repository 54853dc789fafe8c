"""Couplings command: files that change together, and hidden clusters."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..clusters import detect_clusters
from . import app
from ._common import console, engine_session, workspace_option


@app.command()
def couplings(
    ctx: typer.Context,
    workspace: Optional[Path] = workspace_option(),
    threshold: float = typer.Option(
        0.0,
        "--threshold",
        "-t",
        help="Minimum coupling ratio (0.0-1.0)",
        min=0.0,
        max=1.0,
    ),
    clusters: bool = typer.Option(
        False,
        "--clusters",
        help="Group co-changing files without an import link into clusters",
    ),
    limit: int = typer.Option(
        30,
        "--limit",
        "-n",
        help="Maximum number of pairs to list",
        min=1,
        max=200,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List file pairs that change together in git history.

    Pairs without an import between them are hidden coupling: the files
    depend on each other in a way the code does not show.

    [bold cyan]Examples:[/bold cyan]

      debt-engine couplings

      debt-engine couplings --threshold 0.5 --clusters
    """
    with engine_session(ctx, workspace) as engine:
        pairs = engine.get_change_couplings(threshold)

    if clusters:
        groups = detect_clusters(pairs)
        if json_output:
            print(json.dumps([g.to_dict() for g in groups], indent=2))
            return
        if not groups:
            console.print("[green]No hidden coupling clusters.[/green]")
            return
        for i, group in enumerate(groups, start=1):
            console.print(
                f"[bold yellow]Cluster {i}[/bold yellow] "
                f"[dim]{group.size} files, {group.pair_count} pairs, "
                f"mean ratio {group.mean_coupling_ratio:.2f}[/dim]"
            )
            for f in group.files:
                console.print(f"  {f}")
        return

    pairs = pairs[:limit]
    if json_output:
        print(json.dumps([p.to_dict() for p in pairs], indent=2))
        return
    if not pairs:
        console.print("[yellow]No co-changing file pairs in the history window.[/yellow]")
        return

    table = Table(title="Change coupling", show_lines=False, pad_edge=True)
    table.add_column("File A", style="cyan")
    table.add_column("File B", style="cyan")
    table.add_column("Co-changes", justify="right")
    table.add_column("Ratio", justify="right")
    table.add_column("Import", justify="center")
    for pair in pairs:
        table.add_row(
            pair.file_a,
            pair.file_b,
            str(pair.co_change_count),
            f"{pair.coupling_ratio:.2f}",
            "[green]yes[/green]" if pair.has_import_link else "[yellow]hidden[/yellow]",
        )
    console.print(table)
