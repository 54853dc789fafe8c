"""Weights command: show, adjust or reset the component weight vector."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import InvalidConfigError
from ..scoring.weights import COMPONENT_KEYS, DEFAULT_WEIGHTS
from . import app
from ._common import console, engine_session, format_component, workspace_option


def _parse_assignment(text: str) -> tuple[str, float]:
    key, sep, value = text.partition("=")
    if not sep:
        raise InvalidConfigError(text, text, "expected KEY=VALUE")
    key = key.strip()
    try:
        return key, float(value)
    except ValueError:
        raise InvalidConfigError(key, value, "weight must be a number")


@app.command()
def weights(
    ctx: typer.Context,
    workspace: Optional[Path] = workspace_option(),
    assignments: Optional[list[str]] = typer.Option(
        None,
        "--set",
        help="Set one weight, e.g. --set churn_rate=0.3 (repeatable)",
    ),
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Restore the default weights",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show or change how much each component contributes to the score.

    Setting one weight rescales the others so the vector still sums to 1.
    Changes are stored per workspace in .debtengine/history.db.

    [bold cyan]Examples:[/bold cyan]

      debt-engine weights

      debt-engine weights --set churn_rate=0.3 --set cyclomatic_complexity=0.1

      debt-engine weights --reset
    """
    with engine_session(ctx, workspace) as engine:
        if reset:
            current = engine.reset_weights()
        else:
            current = dict(engine.config.weights)
        for text in assignments or []:
            key, value = _parse_assignment(text)
            current = engine.set_weight(key, value)

    if json_output:
        print(json.dumps({k: round(current[k], 6) for k in COMPONENT_KEYS}, indent=2))
        return

    table = Table(title="Component weights", show_lines=False, pad_edge=True)
    table.add_column("Component")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Default", justify="right", style="dim")
    for key in COMPONENT_KEYS:
        table.add_row(format_component(key), f"{current[key]:.3f}", f"{DEFAULT_WEIGHTS[key]:.2f}")
    console.print(table)
