"""CLI entry point, registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="debt-engine",
    help="Debt Engine - per-file technical debt scoring for git repositories",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
        hidden=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """
    Score technical debt per file from git history and static analysis.

    [bold cyan]Examples:[/bold cyan]

      debt-engine analyze

      debt-engine analyze /path/to/repo --top 10 --snapshot

      debt-engine file src/app.py

      debt-engine couplings --clusters
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["workers"] = workers

    if version:
        console.print(f"[bold cyan]Debt Engine[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


def main() -> None:
    app()


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .breakdown import file_breakdown as _file_breakdown  # noqa: F401, E402
from .couplings import couplings as _couplings  # noqa: F401, E402
from .history import (  # noqa: F401, E402
    forecast as _forecast,
    history as _history,
    snapshot as _snapshot,
)
from .supervise import supervise as _supervise  # noqa: F401, E402
from .weights import weights as _weights  # noqa: F401, E402
