"""Tests for the weight vector and its normalizer."""

import pytest

from debt_engine.exceptions import InvalidConfigError
from debt_engine.scoring.weights import (
    COMPONENT_KEYS,
    DEFAULT_WEIGHTS,
    WEIGHT_TOLERANCE,
    default_weights,
    from_percentages,
    is_normalized,
    normalize_weights,
    set_weight,
    with_defaults,
)


class TestDefaultWeights:
    def test_defaults_sum_to_one(self):
        assert sum(DEFAULT_WEIGHTS.values()) == pytest.approx(1.0, abs=WEIGHT_TOLERANCE)

    def test_defaults_cover_every_component(self):
        assert set(DEFAULT_WEIGHTS) == set(COMPONENT_KEYS)
        assert len(COMPONENT_KEYS) == 8

    def test_documented_values(self):
        assert DEFAULT_WEIGHTS["churn_rate"] == 0.22
        assert DEFAULT_WEIGHTS["code_smell_density"] == 0.20
        assert DEFAULT_WEIGHTS["coupling_index"] == 0.18
        assert DEFAULT_WEIGHTS["change_coupling"] == 0.12
        assert DEFAULT_WEIGHTS["test_coverage_gap"] == 0.12
        assert DEFAULT_WEIGHTS["knowledge_concentration"] == 0.08
        assert DEFAULT_WEIGHTS["cyclomatic_complexity"] == 0.05
        assert DEFAULT_WEIGHTS["decision_staleness"] == 0.03

    def test_default_weights_returns_a_copy(self):
        weights = default_weights()
        weights["churn_rate"] = 0.9
        assert DEFAULT_WEIGHTS["churn_rate"] == 0.22

    def test_defaults_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_WEIGHTS["churn_rate"] = 0.5  # type: ignore[index]


class TestNormalizeWeights:
    def test_rescales_to_one(self):
        weights = normalize_weights({key: 2.0 for key in COMPONENT_KEYS})
        # Values above 1 are read as percentages, so all eight end up equal.
        for key in COMPONENT_KEYS:
            assert weights[key] == pytest.approx(1 / 8)
        assert is_normalized(weights)

    def test_preserves_proportions(self):
        raw = {key: 0.0 for key in COMPONENT_KEYS}
        raw["churn_rate"] = 0.3
        raw["coupling_index"] = 0.1
        weights = normalize_weights(raw)
        assert weights["churn_rate"] == pytest.approx(0.75)
        assert weights["coupling_index"] == pytest.approx(0.25)

    def test_negative_values_clamp_to_zero(self):
        raw = dict(DEFAULT_WEIGHTS)
        raw["churn_rate"] = -1.0
        weights = normalize_weights(raw)
        assert weights["churn_rate"] == 0.0
        assert is_normalized(weights)

    def test_missing_keys_count_as_zero(self):
        weights = normalize_weights({"churn_rate": 1.0})
        assert weights["churn_rate"] == pytest.approx(1.0)
        assert weights["decision_staleness"] == 0.0

    def test_unknown_keys_are_dropped(self):
        raw = dict(DEFAULT_WEIGHTS)
        raw["bogus"] = 0.5
        weights = normalize_weights(raw)
        assert "bogus" not in weights
        assert weights == pytest.approx(dict(DEFAULT_WEIGHTS))

    def test_all_zero_resets_to_defaults(self):
        weights = normalize_weights({key: 0.0 for key in COMPONENT_KEYS})
        assert weights == dict(DEFAULT_WEIGHTS)

    def test_percentages_are_scaled(self):
        percent = {key: value * 100 for key, value in DEFAULT_WEIGHTS.items()}
        assert normalize_weights(percent) == pytest.approx(dict(DEFAULT_WEIGHTS))

    def test_percent_value_is_not_clamped_to_one(self):
        raw = {key: 0.0 for key in COMPONENT_KEYS}
        raw["churn_rate"] = 30.0
        raw["coupling_index"] = 10.0
        weights = normalize_weights(raw)
        assert weights["churn_rate"] == pytest.approx(0.75)
        assert weights["coupling_index"] == pytest.approx(0.25)


class TestFromPercentages:
    def test_fractions_untouched(self):
        assert from_percentages(DEFAULT_WEIGHTS) == dict(DEFAULT_WEIGHTS)

    def test_any_value_above_one_scales_all(self):
        assert from_percentages({"churn_rate": 50, "coupling_index": 0.5}) == pytest.approx(
            {"churn_rate": 0.5, "coupling_index": 0.005}
        )

    def test_unknown_keys_dropped(self):
        assert from_percentages({"bogus": 40.0, "churn_rate": 0.3}) == {"churn_rate": 0.3}


class TestWithDefaults:
    def test_fills_missing_components(self):
        weights = with_defaults({"churn_rate": 0.5})
        assert weights["churn_rate"] == 0.5
        for key in COMPONENT_KEYS:
            if key != "churn_rate":
                assert weights[key] == DEFAULT_WEIGHTS[key]

    def test_partial_vector_keeps_default_proportions(self):
        weights = normalize_weights(with_defaults({"churn_rate": 0.5}))
        ratio = weights["code_smell_density"] / weights["coupling_index"]
        assert ratio == pytest.approx(0.20 / 0.18)
        assert weights["decision_staleness"] > 0.0


class TestSetWeight:
    def test_set_churn_to_half(self):
        weights = set_weight(DEFAULT_WEIGHTS, "churn_rate", 0.5)
        assert weights["churn_rate"] == pytest.approx(0.5)
        assert sum(weights.values()) == pytest.approx(1.0, abs=WEIGHT_TOLERANCE)

    def test_others_absorb_proportionally(self):
        weights = set_weight(DEFAULT_WEIGHTS, "churn_rate", 0.5)
        # smells:coupling was 0.20:0.18 before and must stay that way.
        ratio = weights["code_smell_density"] / weights["coupling_index"]
        assert ratio == pytest.approx(0.20 / 0.18)

    def test_value_is_clamped(self):
        weights = set_weight(DEFAULT_WEIGHTS, "churn_rate", 3.0)
        assert weights["churn_rate"] == pytest.approx(1.0)
        assert all(weights[k] == pytest.approx(0.0) for k in COMPONENT_KEYS if k != "churn_rate")

    def test_equal_split_when_others_are_zero(self):
        solo = set_weight(DEFAULT_WEIGHTS, "churn_rate", 1.0)
        weights = set_weight(solo, "churn_rate", 0.3)
        assert weights["churn_rate"] == pytest.approx(0.3)
        for key in COMPONENT_KEYS:
            if key != "churn_rate":
                assert weights[key] == pytest.approx(0.7 / 7)

    def test_sum_invariant_over_many_edits(self):
        weights = default_weights()
        for i, key in enumerate(COMPONENT_KEYS * 3):
            weights = set_weight(weights, key, (i % 5) / 4)
            assert abs(sum(weights.values()) - 1.0) <= WEIGHT_TOLERANCE

    def test_zeroing_every_weight_falls_back_to_defaults(self):
        weights = default_weights()
        for key in COMPONENT_KEYS:
            weights = set_weight(weights, key, 0.0)
        assert is_normalized(weights)

    def test_unknown_key_raises(self):
        with pytest.raises(InvalidConfigError):
            set_weight(DEFAULT_WEIGHTS, "nonsense", 0.5)

    def test_reset_restores_exact_defaults(self):
        edited = set_weight(DEFAULT_WEIGHTS, "knowledge_concentration", 0.6)
        assert edited != dict(DEFAULT_WEIGHTS)
        assert default_weights() == dict(DEFAULT_WEIGHTS)
