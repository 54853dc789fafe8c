"""Knowledge concentration: how much of a file one author owns."""

from __future__ import annotations

from typing import Mapping

from .base import SignalResult


def dominant_share(owners: Mapping[str, int]) -> tuple[str, float]:
    total = sum(owners.values())
    if total <= 0:
        return "", 0.0
    author, lines = max(owners.items(), key=lambda item: (item[1], item[0]))
    return author, lines / total


def score_knowledge(owners: Mapping[str, int], bus_factor_threshold: float) -> SignalResult:
    """Linear ramp from 0 at the threshold share to 100 at sole ownership.

    ``bus_factor_threshold`` is a percentage; with the default of 50 an even
    two-author split scores 0 and a 75/25 split scores 50.
    """
    if not owners:
        return SignalResult.skipped("no ownership data")
    author, share = dominant_share(owners)
    threshold = bus_factor_threshold / 100.0
    details = (f"{author} owns {share:.0%} of lines", f"{len(owners)} authors")
    if share <= threshold:
        return SignalResult(0.0, details)
    return SignalResult((share - threshold) / (1.0 - threshold) * 100.0, details)
