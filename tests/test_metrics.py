"""
Unit Tests for the metrics library
"""
import pytest

from powerball_eval.config import PRIZE_TIERS
from powerball_eval.metrics import (
    aggregate_predictions, assess_interval_coverage, calculate_draw_metrics,
    compute_consistency, compute_expected_value, compute_overall_score,
    count_matches, determine_prize_tier, match_distribution,
)


EXPECTED_TIERS = {
    (5, True): "jackpot",
    (5, False): "match5",
    (4, True): "match4plus",
    (4, False): "match4",
    (3, True): "match3plus",
    (3, False): "match3",
    (2, True): "match2plus",
    (2, False): None,
    (1, True): "match1plus",
    (1, False): None,
    (0, True): "powerball",
    (0, False): None,
}


def _logged(predicted, actual, pb_pred=1, pb_actual=2, intervals=None):
    prediction = {"white_balls": predicted, "powerball": pb_pred, "confidence": 0.5,
                  "method": "test"}
    if intervals is not None:
        prediction["intervals"] = intervals
    actual_draw = {"white_balls": actual, "powerball": pb_actual}
    return {"metrics": calculate_draw_metrics(prediction, actual_draw)}


class TestPrizeTiers:
    @pytest.mark.parametrize("matches, pb_match", list(EXPECTED_TIERS))
    def test_every_combination(self, matches, pb_match):
        assert determine_prize_tier(matches, pb_match) == EXPECTED_TIERS[(matches, pb_match)]

    def test_each_tier_reached_exactly_once(self):
        tiers = [t for t in EXPECTED_TIERS.values() if t is not None]
        assert sorted(tiers) == sorted(PRIZE_TIERS)


class TestDrawMetrics:
    def test_count_matches_is_set_intersection(self):
        assert count_matches([1, 1, 2], [1, 2, 3]) == 2
        assert count_matches([], [1, 2, 3]) == 0
        assert count_matches(None, [1]) == 0

    def test_full_record(self):
        prediction = {"white_balls": [5, 4, 3, 2, 1], "powerball": 7}
        actual = {"white_balls": [1, 2, 3, 10, 20], "powerball": 7}
        m = calculate_draw_metrics(prediction, actual)
        assert m["white_ball_matches"] == 3
        assert m["powerball_match"] is True
        assert m["prize_tier"] == "match3plus"
        assert m["position_errors"] == [0, 0, 0, 6, 15]
        assert m["mean_absolute_error"] == pytest.approx(4.2)
        assert m["confidence_accuracy"] is None
        assert m["is_winning_ticket"] is True

    def test_missing_powerball_never_matches(self):
        m = calculate_draw_metrics({"white_balls": [1, 2, 3, 4, 5], "powerball": None},
                                   {"white_balls": [6, 7, 8, 9, 10], "powerball": 1})
        assert m["powerball_match"] is False
        assert m["prize_tier"] is None

    def test_empty_guess_has_no_position_error(self):
        m = calculate_draw_metrics({"white_balls": [], "powerball": None},
                                   {"white_balls": [6, 7, 8, 9, 10], "powerball": 1})
        assert m["mean_absolute_error"] is None

    def test_interval_coverage(self):
        intervals = [{"lower": v - 1, "upper": v + 1} for v in (10, 20, 30, 40, 50)]
        intervals.append({"lower": 1, "upper": 26})
        within, accuracy = assess_interval_coverage(intervals, [11, 25, 30, 39, 60])
        assert within == 3
        assert accuracy == pytest.approx(0.6)
        assert assess_interval_coverage(None, [1, 2, 3, 4, 5]) == (None, None)


class TestConsistency:
    def test_zero_mean(self):
        assert compute_consistency([0, 0, 0])["consistency_score"] == 0.0

    def test_constant_matches_are_fully_consistent(self):
        assert compute_consistency([2, 2, 2])["consistency_score"] == pytest.approx(1.0)

    def test_high_spread_floors_at_zero(self):
        assert compute_consistency([0, 0, 0, 5])["consistency_score"] == 0.0

    def test_empty(self):
        assert compute_consistency([])["consistency_score"] == 0.0


class TestOverallScore:
    def test_formula(self):
        score = compute_overall_score(2.5, 0.5, 0.25, 7.0)
        assert score == pytest.approx(0.4 * 0.5 + 0.3 * 0.5 + 0.2 * 0.25 + 0.1 * 0.8)

    def test_position_term_clamped(self):
        assert compute_overall_score(0, 0, 0, 100.0) == 0.0
        assert compute_overall_score(5, 1, 1, 0.0) == pytest.approx(1.0)

    def test_custom_weights(self):
        score = compute_overall_score(5, 0, 0, 35.0, weights={"matches": 1.0})
        assert score == pytest.approx(1.0)


class TestAggregate:
    def test_no_predictions_gives_zeroed_result(self):
        result = aggregate_predictions([], strategy="empty")
        assert result["strategy"] == "empty"
        assert result["total_predictions"] == 0
        assert result["overall_score"] == 0.0
        assert result["hit_rate"] == 0.0

    def test_rates(self):
        logs = [
            _logged([1, 2, 3, 4, 5], [1, 2, 3, 4, 5], pb_pred=2, pb_actual=2),  # jackpot
            _logged([1, 2, 3, 40, 50], [1, 2, 3, 4, 5]),                        # match3
            _logged([1, 20, 30, 40, 50], [1, 2, 3, 4, 5]),                      # nothing
            _logged([60, 61, 62, 63, 64], [1, 2, 3, 4, 5], pb_pred=2, pb_actual=2),  # powerball
        ]
        result = aggregate_predictions(logs, strategy="s")
        assert result["total_predictions"] == 4
        assert result["average_matches"] == pytest.approx(9 / 4)
        assert result["hit_rate"] == pytest.approx(0.5)
        assert result["win_rate"] == pytest.approx(0.75)
        assert result["powerball_hit_rate"] == pytest.approx(0.5)
        assert result["max_matches"] == 5
        assert result["min_matches"] == 0
        assert result["match_distribution"] == {0: 1, 1: 1, 2: 0, 3: 1, 4: 0, 5: 1}
        assert result["prize_tiers"]["jackpot"]["count"] == 1
        assert result["prize_tiers"]["match3"]["rate"] == pytest.approx(0.25)
        assert 0.0 <= result["overall_score"] <= 1.0

    def test_calibration(self):
        intervals = [{"lower": v - 1, "upper": v + 1} for v in (1, 2, 3, 4, 5)]
        logs = [_logged([1, 2, 3, 4, 5], [1, 2, 3, 4, 5], intervals=intervals),
                _logged([1, 2, 3, 4, 5], [10, 20, 30, 40, 50], intervals=intervals)]
        result = aggregate_predictions(logs, confidence_level=0.95)
        calibration = result["confidence_calibration"]
        assert calibration["average_accuracy"] == pytest.approx(0.5)
        assert result["calibration_error"] == pytest.approx(0.45)

    def test_no_intervals_means_no_calibration(self):
        result = aggregate_predictions([_logged([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])])
        assert result["confidence_calibration"] is None
        assert result["calibration_error"] is None

    def test_optional_blocks_follow_request(self):
        logs = [_logged([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])]
        result = aggregate_predictions(logs, metrics_requested=["matches"])
        assert result["prize_tiers"] is None
        assert result["expected_value"] is None
        assert result["consistency_detail"] is None
        assert result["overall_score"] > 0

    def test_all_maes_missing_uses_normalizer(self):
        logs = [_logged([], [1, 2, 3, 4, 5])]
        result = aggregate_predictions(logs)
        assert result["mean_absolute_error"] == 35.0


class TestExpectedValue:
    def test_zero_predictions(self):
        assert compute_expected_value([], 0)["roi"] == 0.0

    def test_roi(self):
        ev = compute_expected_value(["match3", None], 2)
        assert ev["total_cost"] == 4.0
        assert ev["total_prize_value"] == 7.0
        assert ev["roi"] == pytest.approx(0.75)


class TestMatchDistribution:
    def test_counts(self):
        assert match_distribution([0, 0, 5]) == {0: 2, 1: 0, 2: 0, 3: 0, 4: 0, 5: 1}
