"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console

from ..config import load_config
from ..engine import DebtEngine
from ..exceptions import DebtEngineError
from ..logging_config import get_logger
from ..scoring.models import AnalysisResult, SupervisionStatus
from .progress import AnalysisProgressDisplay

console = Console()
logger = get_logger(__name__)


def workspace_option() -> Optional[Path]:
    return typer.Option(
        None,
        "-C",
        "--workspace",
        help="Repository root (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    )


@contextmanager
def engine_session(ctx: typer.Context, workspace: Optional[Path] = None) -> Iterator[DebtEngine]:
    """Open an engine for the workspace; engine errors become exit code 1."""
    obj = ctx.obj or {}
    root = (workspace or Path.cwd()).resolve()
    overrides = {}
    if obj.get("workers") is not None:
        overrides["workers"] = obj["workers"]
    try:
        config = load_config(root, config_file=obj.get("config"), **overrides)
        with DebtEngine(root, config) as engine:
            yield engine
    except DebtEngineError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def run_analysis(engine: DebtEngine, show_progress: bool = True) -> AnalysisResult:
    if not show_progress:
        return engine.run_full_analysis()
    with AnalysisProgressDisplay(console) as display:
        return engine.run_full_analysis(progress=display.update)


def score_file_for(engine: DebtEngine, path: str, show_progress: bool = True) -> None:
    """Bring ``path`` up to date: a rescore against the stored result, else a full run."""
    if engine.result is None:
        run_analysis(engine, show_progress)
    else:
        engine.reanalyze_file(path)


def score_style(score: float, warning: float, critical: float) -> str:
    if score >= critical:
        return "bold red"
    if score >= warning:
        return "yellow"
    return "green"


def supervision_label(status: SupervisionStatus) -> str:
    if status is SupervisionStatus.ACCEPTABLE:
        return "[green]accepted[/green]"
    if status is SupervisionStatus.REGRESSED:
        return "[red]regressed[/red]"
    return ""


def format_component(name: str) -> str:
    return name.replace("_", " ")
