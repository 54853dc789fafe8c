"""Tests for effort estimates and suggested actions."""

from datetime import datetime, timezone

import pytest

from debt_engine.scoring.composite import build_components, score_file
from debt_engine.scoring.roi import (
    GOOD_SHAPE_MESSAGE,
    compute_roi_estimate,
    estimate_effort,
    smell_count_of,
    suggest_actions,
)
from debt_engine.scoring.weights import COMPONENT_KEYS, DEFAULT_WEIGHTS
from debt_engine.signals.base import SignalResult


def _score(loc=400, **signals):
    full = {key: signals.get(key, SignalResult(0.0)) for key in COMPONENT_KEYS}
    return score_file(
        path="/repo/big.py",
        relative_path="big.py",
        signals=full,
        weights=DEFAULT_WEIGHTS,
        loc=loc,
        language="python",
        last_modified=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def _components(**raw):
    return build_components(
        {key: SignalResult(raw.get(key, 0.0)) for key in COMPONENT_KEYS}, DEFAULT_WEIGHTS
    )


class TestComputeRoiEstimate:
    def test_worked_example(self):
        assert compute_roi_estimate(10, 400, 60) == pytest.approx(10.0)

    def test_zero(self):
        assert compute_roi_estimate(0, 0, 0) == 0


class TestEstimateEffort:
    def test_reads_smell_count_from_first_detail(self):
        score = _score(
            code_smell_density=SignalResult(50.0, ("10 smells in 400 LOC", "10 TODO/FIXME markers")),
            coupling_index=SignalResult(60.0),
        )
        assert smell_count_of(score) == 10

        effort = estimate_effort(score)

        # base = 10*0.5 + 400/200 + 60/20 = 10 hours
        assert effort.low_hours == 6
        assert effort.high_hours == 15
        # composite = 50*0.20 + 60*0.18 = 20.8
        assert effort.score_reduction == 8

    def test_clean_file_still_costs_an_hour(self):
        effort = estimate_effort(_score(loc=0))
        assert effort.low_hours == 1
        assert effort.high_hours == 1
        assert effort.score_reduction == 0

    def test_detail_without_count_reads_zero(self):
        score = _score(code_smell_density=SignalResult(0.0, ("binary content",)))
        assert smell_count_of(score) == 0


class TestSuggestActions:
    def test_good_shape(self):
        assert suggest_actions(_components()) == [GOOD_SHAPE_MESSAGE]

    def test_thresholds_are_strict(self):
        components = _components(
            code_smell_density=50,
            churn_rate=60,
            coupling_index=50,
            test_coverage_gap=60,
            knowledge_concentration=60,
            cyclomatic_complexity=50,
            decision_staleness=50,
            change_coupling=50,
        )
        assert suggest_actions(components) == [GOOD_SHAPE_MESSAGE]

    def test_every_component_above_threshold(self):
        components = _components(**{key: 100.0 for key in COMPONENT_KEYS})
        actions = suggest_actions(components)
        assert len(actions) == 8
        assert GOOD_SHAPE_MESSAGE not in actions

    def test_god_function_hint(self):
        components = build_components(
            {
                "code_smell_density": SignalResult(
                    80.0, ("3 smells in 120 LOC", "2 god functions", "1 TODO/FIXME markers")
                )
            },
            DEFAULT_WEIGHTS,
        )
        actions = suggest_actions(components)
        assert actions[0].startswith("Extract large functions")
        assert len(actions) == 2

    def test_churn_only(self):
        actions = suggest_actions(_components(churn_rate=90))
        assert len(actions) == 1
        assert "change frequency" in actions[0]
