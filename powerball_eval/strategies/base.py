"""
Shared helpers for prediction strategies.

A strategy is any callable predict(df, options) -> dict, where df holds
every draw revealed so far and the returned dict is a PredictionResult:
white_balls, powerball, confidence, method and optional intervals.
"""
import numpy as np

from powerball_eval.config import (
    DEFAULT_SEED, POWERBALL_LOOKBACK, POWERBALL_MAX, POWERBALL_MIN,
    WHITE_BALL_MAX, WHITE_BALL_MIN, WHITE_BALLS_PER_DRAW,
)
from powerball_eval.draws import powerball_array

ALL_WHITE_BALLS = list(range(WHITE_BALL_MIN, WHITE_BALL_MAX + 1))


def make_prediction(white_balls, powerball, confidence, method, **extra):
    """Build a PredictionResult dict with plain Python ints."""
    prediction = {
        "white_balls": [int(b) for b in white_balls],
        "powerball": None if powerball is None else int(powerball),
        "confidence": float(confidence),
        "method": method,
    }
    prediction.update(extra)
    return prediction


def get_rng(options):
    """Random source for a strategy call: an injected generator or a seeded one."""
    options = options or {}
    rng = options.get("rng")
    if rng is not None:
        return rng
    return np.random.default_rng(options.get("seed", DEFAULT_SEED))


def top_numbers(scores, count=WHITE_BALLS_PER_DRAW):
    """
    Pick the count highest-scoring numbers from {number: score}.

    Ties go to the lower number so the choice is deterministic.
    """
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [num for num, _ in ranked[:count]]


def predict_powerball(df, lookback=POWERBALL_LOOKBACK):
    """Most frequent powerball among the last lookback draws, ties to the lowest."""
    if len(df) == 0:
        raise ValueError("Cannot predict a powerball from an empty history")
    recent = powerball_array(df.iloc[-lookback:])
    counts = np.bincount(recent, minlength=POWERBALL_MAX + 1)
    counts[:POWERBALL_MIN] = 0
    return int(np.argmax(counts))


def resolve_predictor(strategy):
    """Accept a predict callable or an object exposing .predict."""
    if hasattr(strategy, "predict") and callable(strategy.predict):
        return strategy.predict
    if callable(strategy):
        return strategy
    raise TypeError(f"Strategy {strategy!r} is neither callable nor has a predict method")


def make_distinct(values, low=WHITE_BALL_MIN, high=WHITE_BALL_MAX, min_gap=1):
    """
    Force an ascending list of ints to be strictly increasing by at least
    min_gap while staying inside [low, high].
    """
    out = sorted(int(v) for v in values)
    n = len(out)
    if n == 0:
        return out
    out[0] = max(low, out[0])
    for i in range(1, n):
        if out[i] - out[i - 1] < min_gap:
            out[i] = out[i - 1] + min_gap
    # Pull back from the top if the pushes ran past the range
    if out[-1] > high:
        out[-1] = high
        for i in range(n - 2, -1, -1):
            if out[i + 1] - out[i] < min_gap:
                out[i] = out[i + 1] - min_gap
    return out
