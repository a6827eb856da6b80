"""
Frequency Analysis Strategy

Picks the five white balls drawn most often over a recent lookback window.
"""

import numpy as np

from powerball_eval.config import WHITE_BALL_MAX
from powerball_eval.draws import white_ball_matrix
from powerball_eval.strategies.base import make_prediction, predict_powerball, top_numbers

LOOKBACK = 100


def white_ball_counts(df):
    """Array of length 70 where counts[n] is how often n was drawn."""
    counts = np.bincount(white_ball_matrix(df).ravel(), minlength=WHITE_BALL_MAX + 1)
    counts[0] = 0
    return counts


def predict(df, options=None):
    """Top five most frequent white balls; ties go to the lower number."""
    options = options or {}
    if len(df) == 0:
        raise ValueError("Cannot rank frequencies of an empty history")
    recent = df.iloc[-options.get("lookback", LOOKBACK):]
    counts = white_ball_counts(recent)
    scores = {n: int(counts[n]) for n in range(1, WHITE_BALL_MAX + 1)}

    return make_prediction(
        top_numbers(scores),
        predict_powerball(df),
        0.60,
        "frequency-analysis",
        frequencies={n: c / len(recent) for n, c in scores.items() if c},
    )
