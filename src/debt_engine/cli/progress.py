"""Progress bar for a full analysis run."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from ..scoring.models import AnalysisProgress


class AnalysisProgressDisplay:
    """Renders ``AnalysisProgress`` callbacks as a single bar.

    The bar starts as an indeterminate spinner while history is extracted
    and switches to a counted bar on the first callback.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def start(self) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("[dim]{task.fields[current_file]}"),
            console=self.console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(
            "Reading git history", total=None, current_file=""
        )

    def update(self, progress: AnalysisProgress) -> None:
        if self._progress is None or self._task_id is None:
            return
        self._progress.update(
            self._task_id,
            description="Scoring files",
            total=progress.total,
            completed=progress.current,
            current_file=_shorten(progress.current_file),
        )

    def stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None

    def __enter__(self) -> "AnalysisProgressDisplay":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def _shorten(path: str, width: int = 40) -> str:
    if len(path) <= width:
        return path
    return "..." + path[-(width - 3) :]
