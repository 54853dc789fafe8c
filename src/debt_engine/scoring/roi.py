"""Remediation effort estimates and suggested actions for a file."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Mapping

from .models import ComponentScore, FileScore

_LEADING_INT_RE = re.compile(r"^(\d+)")

GOOD_SHAPE_MESSAGE = "This file is in good shape, no urgent actions needed"


def compute_roi_estimate(smell_count: float, loc: float, coupling_score: float) -> float:
    """Estimated remediation effort in hours."""
    return smell_count * 0.5 + loc / 200 + coupling_score / 20


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def smell_count_of(file_score: FileScore) -> int:
    """Total smell count, read from the leading integer of the first smell detail."""
    smells = file_score.components.get("code_smell_density")
    if smells is None or not smells.details:
        return 0
    match = _LEADING_INT_RE.match(smells.details[0])
    return int(match.group(1)) if match else 0


@dataclass(frozen=True)
class EffortEstimate:
    low_hours: int
    high_hours: int
    score_reduction: int


def estimate_effort(file_score: FileScore) -> EffortEstimate:
    coupling = file_score.components["coupling_index"].raw_score
    base = compute_roi_estimate(smell_count_of(file_score), file_score.loc, coupling)
    return EffortEstimate(
        low_hours=max(1, _round_half_up(base * 0.6)),
        high_hours=_round_half_up(base * 1.4) + 1,
        score_reduction=_round_half_up(file_score.composite_score * 0.4),
    )


def _raw(components: Mapping[str, ComponentScore], key: str) -> float:
    component = components.get(key)
    return component.raw_score if component is not None else 0.0


def suggest_actions(components: Mapping[str, ComponentScore]) -> list[str]:
    """Remediation hints for every component above its action threshold."""
    actions: list[str] = []

    if _raw(components, "code_smell_density") > 50:
        details = components["code_smell_density"].details
        if any("god function" in d for d in details):
            actions.append("Extract large functions into smaller, focused functions")
        actions.append("Address code smells to reduce density across the file")

    if _raw(components, "churn_rate") > 60:
        actions.append(
            "Stabilize this file: high change frequency often signals unclear responsibilities"
        )

    if _raw(components, "coupling_index") > 50:
        actions.append("Reduce import coupling with dependency inversion or a facade")

    if _raw(components, "test_coverage_gap") > 60:
        actions.append("Write tests for this file: no co-located test file detected")

    if _raw(components, "knowledge_concentration") > 60:
        actions.append("Spread ownership through pairing or reviews by other team members")

    if _raw(components, "cyclomatic_complexity") > 50:
        actions.append("Simplify control flow: extract branching logic or use early returns")

    if _raw(components, "decision_staleness") > 50:
        actions.append("Review or create an ADR documenting the design rationale for this file")

    if _raw(components, "change_coupling") > 50:
        actions.append("Investigate co-change partners and consider merging or decoupling")

    return actions or [GOOD_SHAPE_MESSAGE]
