"""
Unit Tests for draw loading and validation
"""
import pandas as pd
import pytest

from powerball_eval.draws import (
    WHITE_COLS, check_draw, draws_to_frame, load_draws, row_to_draw,
    synthetic_draws, validate_draws, white_ball_matrix,
)
from powerball_eval.errors import InvalidDrawError


class TestCheckDraw:
    def test_valid_draw_is_sorted(self):
        balls, pb = check_draw([40, 3, 12, 69, 1], 26)
        assert balls == [1, 3, 12, 40, 69]
        assert pb == 26

    @pytest.mark.parametrize("balls, pb", [
        ([1, 2, 3, 4], 1),
        ([1, 2, 3, 4, 5, 6], 1),
        ([1, 2, 3, 4, 70], 1),
        ([0, 2, 3, 4, 5], 1),
        ([1, 1, 3, 4, 5], 1),
        ([1, 2, 3, 4, 5], 27),
        ([1, 2, 3, 4, 5], None),
        ([1, 2, 3, 4, 5.5], 1),
    ])
    def test_invalid_draws_raise(self, balls, pb):
        with pytest.raises(InvalidDrawError):
            check_draw(balls, pb)

    def test_declared_ball_count_checked(self):
        with pytest.raises(InvalidDrawError, match="expected 5 white balls"):
            check_draw([1, 2, 3, 4, 5], 1, ball_count=6)


class TestValidateDraws:
    def test_synthetic_history_is_clean(self):
        clean, report = validate_draws(synthetic_draws(50))
        assert report == {"total": 50, "valid": 50, "excluded": 0, "reasons": []}
        assert list(clean.index) == list(range(50))

    def test_records_with_bad_draws_are_excluded_and_reported(self):
        records = [
            {"date": "2021-01-01", "white_balls": [1, 2, 3, 4, 5], "powerball": 1},
            {"date": "2021-01-04", "white_balls": [1, 2, 3, 4], "powerball": 1},
            {"date": "2021-01-07", "white_balls": [1, 2, 3, 4, 70], "powerball": 1},
            {"date": "2021-01-10", "white_balls": [7, 7, 3, 4, 5], "powerball": 1},
            {"date": "2021-01-13", "white_balls": [6, 7, 8, 9, 10], "powerball": None},
            {"date": "2021-01-16", "white_balls": [5, 4, 3, 2, 1, 6], "powerball": 2},
            {"date": "2021-01-19", "white_balls": [11, 12, 13, 14, 15], "powerball": 3},
        ]
        clean, report = validate_draws(records)
        assert report["total"] == 7
        assert report["valid"] == 2
        assert report["excluded"] == 5
        assert [r["index"] for r in report["reasons"]] == [1, 2, 3, 4, 5]
        assert clean["powerball"].tolist() == [1, 3]
        assert list(clean.index) == [0, 1]

    def test_invalid_date_does_not_exclude(self):
        records = [{"date": "not a date", "white_balls": [1, 2, 3, 4, 5], "powerball": 1}]
        clean, report = validate_draws(records)
        assert report["valid"] == 1
        assert pd.isna(clean.loc[0, "date"])

    def test_caller_frame_not_modified(self):
        df = synthetic_draws(10)
        before = df.copy()
        validate_draws(df)
        pd.testing.assert_frame_equal(df, before)

    def test_frame_missing_columns_rejected(self):
        with pytest.raises(ValueError, match="missing columns"):
            draws_to_frame(pd.DataFrame({"wb1": [1]}))

    def test_non_mapping_records_rejected(self):
        with pytest.raises(TypeError):
            draws_to_frame([[1, 2, 3, 4, 5]])


class TestHelpers:
    def test_white_ball_matrix_rows_sorted(self, make_frame):
        df = make_frame([([50, 1, 30, 2, 10], 5)])
        assert white_ball_matrix(df).tolist() == [[1, 2, 10, 30, 50]]

    def test_row_to_draw(self, make_frame):
        df = make_frame([([50, 1, 30, 2, 10], 5)])
        draw = row_to_draw(df.iloc[0])
        assert draw["white_balls"] == [1, 2, 10, 30, 50]
        assert draw["powerball"] == 5
        assert draw["date"] == pd.Timestamp("2022-01-01")

    def test_synthetic_pattern(self):
        df = synthetic_draws(3)
        assert df.loc[2, WHITE_COLS].tolist() == [3, 13, 23, 33, 43]
        assert df["powerball"].tolist() == [1, 2, 3]

    def test_load_draws_csv(self, tmp_path):
        path = tmp_path / "draws.csv"
        path.write_text(
            "Date,WB1,WB2,WB3,WB4,WB5,Powerball,Multiplier\n"
            "2021-01-02,1,2,3,4,5,6,2\n"
            "2021-01-06,10,20,30,40,50,7,3\n"
        )
        df = load_draws(path)
        assert list(df.columns) == ["date"] + WHITE_COLS + ["powerball"]
        assert len(df) == 2
        clean, report = validate_draws(df)
        assert report["valid"] == 2
