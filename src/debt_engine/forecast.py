"""Trend projection over recent debt snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from .scoring.models import DebtSnapshot

WINDOW = 8
MIN_SNAPSHOTS = 3
HORIZON_WEEKS = 4
VELOCITY_DEAD_BAND = 0.5
IMPROVEMENT_MARGIN = 2.0


class ForecastStatus(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    CRITICAL = "critical"
    WARNING = "warning"
    IMPROVING = "improving"
    STABLE = "stable"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


@dataclass(frozen=True)
class Velocity:
    points_per_week: float
    direction: Direction


@dataclass(frozen=True)
class Forecast:
    status: ForecastStatus
    current: Optional[float] = None
    projections: tuple[float, ...] = ()  # weeks 1..HORIZON_WEEKS
    slope: float = 0.0
    intercept: float = 0.0
    velocity: Optional[Velocity] = None
    snapshot_count: int = 0

    @property
    def has_projection(self) -> bool:
        return bool(self.projections)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "current": self.current,
            "projections": [round(p, 2) for p in self.projections],
            "slope": round(self.slope, 4),
            "intercept": round(self.intercept, 4),
            "velocity": (
                {
                    "points_per_week": round(self.velocity.points_per_week, 4),
                    "direction": self.velocity.direction.value,
                }
                if self.velocity
                else None
            ),
            "snapshot_count": self.snapshot_count,
        }


def _recent_scores(snapshots: Sequence[DebtSnapshot]) -> list[float]:
    ordered = sorted(snapshots, key=lambda s: (s.timestamp, s.id))
    return [s.composite_score for s in ordered[-WINDOW:]]


def _fit(scores: Sequence[float]) -> tuple[float, float]:
    """OLS slope and intercept of score against snapshot index."""
    x = np.arange(len(scores), dtype=float)
    slope, intercept = np.polyfit(x, np.asarray(scores, dtype=float), 1)
    return float(slope), float(intercept)


def velocity(snapshots: Sequence[DebtSnapshot]) -> Optional[Velocity]:
    """Points per week over the recent window; None with fewer than two snapshots."""
    scores = _recent_scores(snapshots)
    if len(scores) < 2:
        return None
    slope, _ = _fit(scores)
    if slope > VELOCITY_DEAD_BAND:
        direction = Direction.UP
    elif slope < -VELOCITY_DEAD_BAND:
        direction = Direction.DOWN
    else:
        direction = Direction.FLAT
    return Velocity(points_per_week=slope, direction=direction)


def forecast(
    snapshots: Sequence[DebtSnapshot],
    warning_threshold: float = 65.0,
    critical_threshold: float = 80.0,
) -> Forecast:
    """Project the workspace score up to four snapshots ("weeks") ahead.

    Snapshots are taken as one per week; the projection for week ``w`` is
    ``slope * (n - 1 + w) + intercept`` clamped to [0, 100].
    """
    scores = _recent_scores(snapshots)
    if len(scores) < MIN_SNAPSHOTS:
        return Forecast(
            status=ForecastStatus.INSUFFICIENT_DATA,
            current=scores[-1] if scores else None,
            velocity=velocity(snapshots),
            snapshot_count=len(scores),
        )

    n = len(scores)
    slope, intercept = _fit(scores)
    projections = tuple(
        min(100.0, max(0.0, slope * (n - 1 + week) + intercept))
        for week in range(1, HORIZON_WEEKS + 1)
    )
    current = scores[-1]
    final = projections[-1]

    if current < critical_threshold and final >= critical_threshold:
        status = ForecastStatus.CRITICAL
    elif current < warning_threshold and final >= warning_threshold:
        status = ForecastStatus.WARNING
    elif final < current - IMPROVEMENT_MARGIN:
        status = ForecastStatus.IMPROVING
    else:
        status = ForecastStatus.STABLE

    return Forecast(
        status=status,
        current=current,
        projections=projections,
        slope=slope,
        intercept=intercept,
        velocity=velocity(snapshots),
        snapshot_count=n,
    )
