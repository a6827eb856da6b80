"""
Shared fixtures for the evaluation engine tests.
"""
import os
import sys

import pandas as pd
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from powerball_eval.draws import DRAW_COLUMNS, synthetic_draws


SMALL_CONFIG = {
    "min_training_size": 30,
    "test_window_size": 10,
    "step_size": 10,
    "max_validation_periods": 3,
    "bootstrap_iterations": 50,
}


def fixed_strategy(df, options):
    """Always guesses 1-5 with powerball 1."""
    return {"white_balls": [1, 2, 3, 4, 5], "powerball": 1, "confidence": 0.5, "method": "fixed"}


@pytest.fixture
def draws_200():
    return synthetic_draws(200)


@pytest.fixture
def draws_80():
    return synthetic_draws(80)


@pytest.fixture
def small_config():
    return dict(SMALL_CONFIG)


@pytest.fixture
def make_frame():
    """Build a draw frame from [(white_balls, powerball), ...]."""
    def _make(rows):
        dates = pd.date_range("2022-01-01", periods=len(rows), freq="3D")
        records = []
        for date, (balls, pb) in zip(dates, rows):
            record = {"date": date, "powerball": pb}
            record.update({f"wb{i + 1}": b for i, b in enumerate(balls)})
            records.append(record)
        return pd.DataFrame(records, columns=DRAW_COLUMNS)
    return _make
