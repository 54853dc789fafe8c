"""Composite scorer: weighted sum of the eight component signals."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

from ..signals.base import SignalResult
from .models import ComponentScore, FileScore, SupervisionStatus
from .weights import COMPONENT_KEYS, normalize_weights


def compute_composite_score(raw_scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Sum of ``raw * weight`` over the component keys.

    Missing raw scores count as 0. The weights are normalized first, so a
    caller can never score against a vector that does not sum to 1.
    """
    normalized = normalize_weights(weights)
    return sum(float(raw_scores.get(key, 0.0)) * normalized[key] for key in COMPONENT_KEYS)


def build_components(
    signals: Mapping[str, SignalResult], weights: Mapping[str, float]
) -> dict[str, ComponentScore]:
    normalized = normalize_weights(weights)
    components = {}
    for key in COMPONENT_KEYS:
        signal = signals.get(key) or SignalResult.skipped("not computed")
        components[key] = ComponentScore(
            raw_score=signal.raw_score, weight=normalized[key], details=signal.details
        )
    return components


def score_file(
    path: str,
    relative_path: str,
    signals: Mapping[str, SignalResult],
    weights: Mapping[str, float],
    loc: int,
    language: str,
    last_modified: datetime,
    supervision_status: SupervisionStatus = SupervisionStatus.NONE,
) -> FileScore:
    return FileScore.build(
        path=path,
        relative_path=relative_path,
        components=build_components(signals, weights),
        loc=loc,
        language=language,
        last_modified=last_modified,
        supervision_status=supervision_status,
    )


def reweight(file_score: FileScore, weights: Mapping[str, float]) -> FileScore:
    """Rescore an existing FileScore under a new weight vector."""
    normalized = normalize_weights(weights)
    components = {
        key: ComponentScore(c.raw_score, normalized[key], c.details)
        for key, c in file_score.components.items()
    }
    return FileScore.build(
        path=file_score.path,
        relative_path=file_score.relative_path,
        components=components,
        loc=file_score.loc,
        language=file_score.language,
        last_modified=file_score.last_modified,
        supervision_status=file_score.supervision_status,
    )
