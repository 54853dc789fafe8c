"""The eight-component weight vector and its sum-to-one invariant.

Every vector handed to the composite scorer passes through
``normalize_weights``; interactive edits go through ``set_weight`` so the
remaining components absorb the change proportionally.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..exceptions import InvalidConfigError
from ..logging_config import get_logger

logger = get_logger(__name__)

COMPONENT_KEYS: tuple[str, ...] = (
    "churn_rate",
    "code_smell_density",
    "coupling_index",
    "change_coupling",
    "test_coverage_gap",
    "knowledge_concentration",
    "cyclomatic_complexity",
    "decision_staleness",
)

DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "churn_rate": 0.22,
        "code_smell_density": 0.20,
        "coupling_index": 0.18,
        "change_coupling": 0.12,
        "test_coverage_gap": 0.12,
        "knowledge_concentration": 0.08,
        "cyclomatic_complexity": 0.05,
        "decision_staleness": 0.03,
    }
)

WEIGHT_TOLERANCE = 1e-6

# Below this total a vector is treated as all-zero.
_DEGENERATE_TOTAL = 1e-9


def default_weights() -> dict[str, float]:
    """Return a fresh copy of the documented default vector."""
    return dict(DEFAULT_WEIGHTS)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


def is_normalized(weights: Mapping[str, float]) -> bool:
    return abs(sum(weights.get(k, 0.0) for k in COMPONENT_KEYS) - 1.0) <= WEIGHT_TOLERANCE


def from_percentages(weights: Mapping[str, float]) -> dict[str, float]:
    """Read a vector holding any value above 1 as percentages."""
    values = {key: float(weights[key]) for key in COMPONENT_KEYS if key in weights}
    if any(values.get(key, 0.0) > 1.0 for key in COMPONENT_KEYS):
        return {key: value / 100.0 for key, value in values.items()}
    return values


def with_defaults(weights: Mapping[str, float]) -> dict[str, float]:
    """Fill components missing from ``weights`` with their default value."""
    return {key: weights.get(key, DEFAULT_WEIGHTS[key]) for key in COMPONENT_KEYS}


def normalize_weights(weights: Mapping[str, float]) -> dict[str, float]:
    """Clamp every component to [0, 1] and rescale the vector to sum to 1.

    A vector holding any value above 1 is first divided by 100 (weights
    given in percent). Missing components count as 0 and unknown keys are
    dropped. A vector whose clamped total is zero resets to the defaults.
    """
    unknown = set(weights) - set(COMPONENT_KEYS)
    if unknown:
        logger.warning("Ignoring unknown weight keys: %s", ", ".join(sorted(unknown)))

    weights = from_percentages(weights)
    clamped = {key: _clamp(weights.get(key, 0.0)) for key in COMPONENT_KEYS}
    total = sum(clamped.values())
    if total <= _DEGENERATE_TOTAL:
        logger.info("Weight vector is all zero, resetting to defaults")
        return default_weights()
    return {key: value / total for key, value in clamped.items()}


def set_weight(weights: Mapping[str, float], key: str, value: float) -> dict[str, float]:
    """Set one component and let the other seven absorb the difference.

    The other components give up ``value - old`` in proportion to their
    share of their own total (equally when that total is 0), each floored
    at 0, and the result is rescaled to sum to exactly 1.
    """
    if key not in COMPONENT_KEYS:
        raise InvalidConfigError(key, value, "unknown weight component")

    current = normalize_weights(weights)
    new_value = _clamp(value)
    delta = new_value - current[key]

    others = [k for k in COMPONENT_KEYS if k != key]
    others_total = sum(current[k] for k in others)

    updated = {key: new_value}
    for other in others:
        if others_total > _DEGENERATE_TOTAL:
            share = current[other] / others_total
        else:
            share = 1.0 / len(others)
        updated[other] = max(0.0, current[other] - delta * share)

    return normalize_weights(updated)
