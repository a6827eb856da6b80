"""
Unit Tests for descriptive draw statistics
"""
import pytest

from powerball_eval.analysis import (
    frequency_analysis, gap_analysis, get_full_analysis, hot_cold_numbers,
    overdue_numbers, pair_analysis,
)
from powerball_eval.draws import synthetic_draws


class TestFrequency:
    def test_full_cycle_is_uniform(self):
        result = frequency_analysis(synthetic_draws(69))
        assert result["total_draws"] == 69
        assert set(result["white_ball_counts"].values()) == {5}
        # 69 draws cycle the powerball 2 full times plus 1-17 once more
        assert result["powerball_counts"][1] == 3
        assert result["powerball_counts"][17] == 3
        assert result["powerball_counts"][18] == 2
        assert result["ranked"][0] == (1, 5)
        assert len(result["dataframe"]) == 69

    def test_empty_history(self):
        result = frequency_analysis(synthetic_draws(0))
        assert result["total_draws"] == 0
        assert set(result["white_ball_counts"].values()) == {0}


class TestHotCold:
    def test_hot_and_cold(self, make_frame):
        df = make_frame([
            ([1, 2, 3, 4, 5], 1),
            ([1, 2, 3, 4, 6], 1),
            ([1, 2, 3, 7, 8], 1),
        ])
        result = hot_cold_numbers(df, top_n=3)
        assert result["hot"] == [1, 2, 3]
        # never-drawn numbers come first, lowest first
        assert result["cold"] == [9, 10, 11]

    def test_recent_window(self, make_frame):
        df = make_frame([([60, 61, 62, 63, 64], 1), ([1, 2, 3, 4, 5], 1)])
        result = hot_cold_numbers(df, recent_count=1, top_n=5)
        assert result["hot"] == [1, 2, 3, 4, 5]
        assert result["draws_considered"] == 1


class TestOverdue:
    def test_order(self, make_frame):
        df = make_frame([
            ([1, 2, 3, 4, 5], 1),
            ([1, 2, 3, 4, 6], 1),
            ([1, 2, 3, 4, 7], 1),
        ])
        overdue = overdue_numbers(df)
        assert len(overdue) == 69
        assert overdue[0] == (8, None)
        seen = [entry for entry in overdue if entry[1] is not None]
        assert seen[:3] == [(5, 2), (6, 1), (1, 0)]

    def test_top_n(self, make_frame):
        df = make_frame([([1, 2, 3, 4, 5], 1)])
        assert len(overdue_numbers(df, top_n=4)) == 4


class TestPairsAndGaps:
    def test_pairs(self, make_frame):
        df = make_frame([([1, 2, 3, 4, 5], 1), ([1, 2, 10, 20, 30], 1)])
        result = pair_analysis(df, top_n=1)
        assert result["top_pairs"] == [((1, 2), 2)]
        assert result["total_pairs"] == 19

    def test_gaps(self, make_frame):
        result = gap_analysis(make_frame([([16, 1, 8, 2, 4], 1)]))
        assert result["gap_counts"] == {1: 1, 2: 1, 4: 1, 8: 1}
        assert result["mean_gap"] == pytest.approx(3.75)
        assert result["most_common_gap"] == 1

    def test_gaps_empty(self):
        assert gap_analysis(synthetic_draws(0))["most_common_gap"] is None


class TestFullAnalysis:
    def test_keys(self):
        result = get_full_analysis(synthetic_draws(30))
        assert set(result) == {"frequency", "hot_cold", "overdue", "pairs", "gaps"}
        assert len(result["overdue"]) == 10
