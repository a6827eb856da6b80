"""
Unit Tests for the built-in prediction strategies
"""
import pandas as pd
import pytest

from powerball_eval.draws import synthetic_draws
from powerball_eval.strategies import ALL_STRATEGIES, BUILTIN_STRATEGIES, get_strategy
from powerball_eval.strategies.base import make_distinct, predict_powerball, top_numbers
from powerball_eval.strategies.confidence_interval import (
    adjust_for_position_constraints, position_intervals, z_score,
)
from powerball_eval.strategies.energy import calculate_energy, digital_root, is_prime
from powerball_eval.strategies.offsets import offset_numbers


@pytest.fixture
def history():
    return synthetic_draws(120)


class TestStrategyContract:
    @pytest.mark.parametrize("name", sorted(ALL_STRATEGIES))
    def test_prediction_shape(self, name, history):
        prediction = ALL_STRATEGIES[name](history, {"seed": 1, "bootstrap_iterations": 50})
        balls = prediction["white_balls"]
        assert len(balls) == 5
        assert len(set(balls)) == 5
        assert all(1 <= b <= 69 for b in balls)
        assert 1 <= prediction["powerball"] <= 26
        assert 0.0 <= prediction["confidence"] <= 1.0
        assert isinstance(prediction["method"], str)

    @pytest.mark.parametrize("name", sorted(ALL_STRATEGIES))
    def test_idempotent(self, name, history):
        options = {"seed": 3, "bootstrap_iterations": 50}
        first = ALL_STRATEGIES[name](history, dict(options))
        second = ALL_STRATEGIES[name](history, dict(options))
        assert first == second

    @pytest.mark.parametrize("name", sorted(ALL_STRATEGIES))
    def test_input_not_modified(self, name, history):
        before = history.copy()
        ALL_STRATEGIES[name](history, {"bootstrap_iterations": 50})
        pd.testing.assert_frame_equal(history, before)

    @pytest.mark.parametrize("name", ["confidence", "energy", "frequency", "temporal"])
    def test_empty_history_raises(self, name):
        with pytest.raises(ValueError):
            BUILTIN_STRATEGIES[name](synthetic_draws(0), {})

    def test_registry(self):
        assert set(BUILTIN_STRATEGIES) == {"confidence", "energy", "frequency", "temporal"}
        assert set(ALL_STRATEGIES) == set(BUILTIN_STRATEGIES) | {"hybrid", "offsets"}
        assert get_strategy("energy") is BUILTIN_STRATEGIES["energy"]
        with pytest.raises(KeyError):
            get_strategy("astrology")


class TestSharedHelpers:
    def test_top_numbers_ties_to_lower(self):
        assert top_numbers({9: 1.0, 3: 1.0, 7: 2.0, 1: 0.5}, count=2) == [7, 3]

    def test_powerball_most_frequent_ties_to_lowest(self, make_frame):
        df = make_frame([([1, 2, 3, 4, 5], 9), ([1, 2, 3, 4, 5], 4),
                         ([1, 2, 3, 4, 5], 9), ([1, 2, 3, 4, 5], 4)])
        assert predict_powerball(df) == 4

    def test_powerball_lookback(self, make_frame):
        rows = [([1, 2, 3, 4, 5], 1)] * 10 + [([1, 2, 3, 4, 5], 2)] * 3
        assert predict_powerball(make_frame(rows), lookback=3) == 2

    def test_make_distinct(self):
        assert make_distinct([5, 5, 5]) == [5, 6, 7]
        assert make_distinct([69, 69, 69]) == [67, 68, 69]
        assert make_distinct([10, 11], min_gap=2) == [10, 12]


class TestConfidenceInterval:
    def test_z_score(self):
        assert z_score(0.95) == pytest.approx(1.959964, rel=1e-5)

    @pytest.mark.parametrize("method", ["bootstrap", "normal", "time-weighted"])
    def test_intervals_in_range(self, method):
        intervals = position_intervals(synthetic_draws(120), method=method, iterations=50)
        assert [iv["position"] for iv in intervals[5:]] == ["powerball"]
        for iv in intervals[:5]:
            assert 1 <= iv["lower"] <= iv["upper"] <= 69
        predictions = [iv["prediction"] for iv in intervals[:5]]
        assert all(b - a >= 2 for a, b in zip(predictions, predictions[1:]))

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            position_intervals(synthetic_draws(20), method="magic")

    def test_constraint_adjustment_shifts_interval(self):
        intervals = [{"position": f"ball{i}", "prediction": 10, "lower": 8, "upper": 12}
                     for i in range(1, 6)]
        intervals.append({"position": "powerball", "prediction": 5, "lower": 1, "upper": 26})
        adjusted = adjust_for_position_constraints(intervals)
        assert [iv["prediction"] for iv in adjusted[:5]] == [10, 12, 14, 16, 18]
        assert adjusted[1]["lower"] == 10
        assert adjusted[1]["upper"] == 14
        assert adjusted[1]["constraint_adjusted"] is True
        assert adjusted[5]["position"] == "powerball"

    def test_reordered_positions_are_relabelled(self):
        predictions = [40, 10, 20, 30, 50]
        intervals = [{"position": f"ball{i}", "prediction": p, "lower": p - 2, "upper": p + 2}
                     for i, p in enumerate(predictions, start=1)]
        intervals.append({"position": "powerball", "prediction": 5, "lower": 1, "upper": 26})
        adjusted = adjust_for_position_constraints(intervals)
        assert [iv["position"] for iv in adjusted] == [
            "ball1", "ball2", "ball3", "ball4", "ball5", "powerball"]
        assert [iv["prediction"] for iv in adjusted[:5]] == [10, 20, 30, 40, 50]
        assert adjusted[0]["lower"] == 8


class TestEnergy:
    def test_features(self):
        assert is_prime(2) and is_prime(67)
        assert not is_prime(1) and not is_prime(69)
        assert digital_root(69) == 6
        assert digital_root(9) == 9

    def test_weights_change_energy(self):
        default = calculate_energy([7])[0]["energy"]
        prime_only = calculate_energy(
            [7], {"prime": 1.0, "digital_root": 0.0, "mod5": 0.0, "grid_position": 0.0}
        )[0]["energy"]
        assert prime_only == pytest.approx(1.0)
        assert default != prime_only


class TestOffsets:
    def test_offset_numbers_wrap_and_dedupe(self):
        assert offset_numbers(0, [1, 2]) == [2, 3]
        assert offset_numbers(68, [1]) == [1]
        assert offset_numbers(10, [5, 74]) == [16]

    def test_custom_offsets(self, history):
        default = get_strategy("offsets")(history, {})
        custom = get_strategy("offsets")(history, {"offsets": [1, 2, 3, 4, 5]})
        base = default["base"]
        assert custom["white_balls"] == [(base + k) % 69 + 1 for k in range(1, 6)]
