"""Coupling signals: import fan-in/fan-out and change coupling."""

from __future__ import annotations

from typing import Mapping

from ..scanning.imports import ImportGraph
from ..temporal.models import HistorySnapshot
from .base import SignalResult

TOP_PARTNERS = 5


def coupling_ratio(co_changes: int, churn_a: int, churn_b: int) -> float:
    """Share of the rarer-changing file's commits that also touched the other.

    Symmetric in its arguments. A partner that never changed gives 0.
    """
    rarer = min(churn_a, churn_b)
    if rarer <= 0:
        return 0.0
    return min(1.0, co_changes / rarer)


def score_coupling_index(graph: ImportGraph, relative_path: str) -> SignalResult:
    incoming, outgoing = graph.degree(relative_path)
    detail = f"{incoming} incoming, {outgoing} outgoing imports"
    if graph.max_degree == 0:
        return SignalResult(0.0, (detail,))
    raw = (incoming + outgoing) / (2.0 * graph.max_degree) * 100.0
    return SignalResult(min(100.0, raw), (detail,))


def partner_ratios(history: HistorySnapshot, relative_path: str) -> dict[str, float]:
    own = history.churn_of(relative_path)
    partners: Mapping[str, int] = history.co_changes_of(relative_path)
    return {
        partner: coupling_ratio(count, own, history.churn_of(partner))
        for partner, count in partners.items()
    }


def score_change_coupling(history: HistorySnapshot, relative_path: str) -> SignalResult:
    """Mean of the strongest partner ratios, scaled to 0-100."""
    ratios = partner_ratios(history, relative_path)
    if not ratios:
        return SignalResult(0.0, ("no co-change partners",))
    top = sorted(ratios.items(), key=lambda item: (-item[1], item[0]))[:TOP_PARTNERS]
    mean = sum(r for _, r in top) / len(top)
    details = [f"{len(ratios)} co-change partners"]
    details.extend(f"{partner}: {ratio:.0%}" for partner, ratio in top)
    return SignalResult(mean * 100.0, tuple(details))
