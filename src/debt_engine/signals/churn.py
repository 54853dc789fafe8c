"""Churn: commit frequency normalized against the rest of the repository."""

from __future__ import annotations

from typing import Mapping

import numpy as np

from .base import SignalResult


def churn_threshold(churn: Mapping[str, int], percentile: float) -> float:
    """Churn count at ``percentile`` of the files that changed at all.

    Unchanged files are left out so a mostly dormant repository does not
    drag the threshold to zero.
    """
    changed = np.fromiter((c for c in churn.values() if c > 0), dtype=float)
    if changed.size == 0:
        return 0.0
    return float(np.percentile(changed, percentile))


def score_churn(count: int, threshold: float, percentile: float) -> SignalResult:
    """0 for no changes, 100 at or above the threshold, linear in between."""
    plural = "commit" if count == 1 else "commits"
    if count <= 0:
        return SignalResult(0.0, ("0 commits in window",))
    if threshold <= 0 or count >= threshold:
        raw = 100.0
    else:
        raw = 100.0 * count / threshold
    return SignalResult(
        raw,
        (f"{count} {plural} in window", f"p{percentile:g} of repository churn is {threshold:.1f}"),
    )
