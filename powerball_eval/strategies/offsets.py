"""
Offset Strategy

Takes the frequency-weighted mean white-ball value of the history as a
base and adds a fixed set of offsets to it, wrapping around 1-69. The
first five distinct results are the guess. The offsets are the parameter
the optimizer searches over.
"""

import numpy as np

from powerball_eval.config import WHITE_BALL_MAX
from powerball_eval.strategies.base import make_prediction, predict_powerball
from powerball_eval.strategies.frequency import white_ball_counts

DEFAULT_OFFSETS = [3, 11, 19, 27, 35, 43, 51, 59]
FALLBACK_BASE = 35


def offset_numbers(base, offsets):
    """Distinct (base + offset) % 69 + 1 values in offset order."""
    numbers = []
    for offset in offsets:
        n = (base + int(offset)) % WHITE_BALL_MAX + 1
        if n not in numbers:
            numbers.append(n)
    return numbers


def predict(df, options=None):
    options = options or {}
    counts = white_ball_counts(df)
    total = counts.sum()
    if total > 0:
        base = int(round(float(np.dot(np.arange(len(counts)), counts)) / total))
    else:
        base = FALLBACK_BASE

    offsets = options.get("offsets") or DEFAULT_OFFSETS
    return make_prediction(
        offset_numbers(base, offsets)[:5],
        predict_powerball(df),
        0.70,
        "offsets",
        base=base,
    )
