"""
Position-Based Confidence Interval Strategy

Sorts each historical draw so ball 1 is the lowest number and ball 5 the
highest, then treats each position (and the powerball) as its own series.
The prediction for a position is its rounded mean; the interval around it
comes from one of three methods:

- bootstrap:      percentile interval of resampled means (default)
- normal:         mean +/- z * std / sqrt(n)
- time-weighted:  exponentially decayed mean and variance, recent draws heavier

White-ball predictions are then pushed apart to keep ball1 < ... < ball5
with a minimum gap of 2.
"""

import numpy as np
from scipy import stats

from powerball_eval.config import (
    BOOTSTRAP_ITERATIONS, CONFIDENCE_LEVEL, POWERBALL_MAX, POWERBALL_MIN,
    WHITE_BALL_MAX, WHITE_BALL_MIN,
)
from powerball_eval.draws import powerball_array, white_ball_matrix
from powerball_eval.strategies.base import get_rng, make_distinct, make_prediction

POSITIONS = ["ball1", "ball2", "ball3", "ball4", "ball5", "powerball"]
MIN_POSITION_GAP = 2
TIME_DECAY = 0.95


def z_score(confidence_level):
    """Two-sided normal critical value for a confidence level."""
    return float(stats.norm.ppf(0.5 + confidence_level / 2.0))


def bootstrap_interval(values, confidence_level, iterations, rng):
    """Percentile bootstrap interval of the mean."""
    values = np.asarray(values, dtype=float)
    n = len(values)
    idx = rng.integers(0, n, size=(iterations, n))
    means = np.sort(values[idx].mean(axis=1))
    alpha = 1.0 - confidence_level
    lower_idx = int(np.floor(alpha / 2 * iterations))
    upper_idx = min(int(np.floor((1 - alpha / 2) * iterations)), iterations - 1)
    return {
        "prediction": int(round(values.mean())),
        "lower": int(round(means[lower_idx])),
        "upper": int(round(means[upper_idx])),
    }


def normal_interval(values, confidence_level):
    values = np.asarray(values, dtype=float)
    mean = values.mean()
    margin = z_score(confidence_level) * values.std() / np.sqrt(len(values))
    return {
        "prediction": int(round(mean)),
        "lower": int(round(mean - margin)),
        "upper": int(round(mean + margin)),
    }


def time_weighted_interval(values, confidence_level, decay=TIME_DECAY):
    """
    Exponentially weighted interval. The effective sample size
    (sum w)^2 / sum w^2 replaces n in the standard error.
    """
    values = np.asarray(values, dtype=float)
    n = len(values)
    weights = decay ** np.arange(n - 1, -1, -1, dtype=float)
    mean = np.average(values, weights=weights)
    variance = np.average((values - mean) ** 2, weights=weights)
    effective_n = weights.sum() ** 2 / (weights ** 2).sum()
    margin = z_score(confidence_level) * np.sqrt(variance / effective_n)
    return {
        "prediction": int(round(mean)),
        "lower": int(round(mean - margin)),
        "upper": int(round(mean + margin)),
    }


def _position_interval(values, method, confidence_level, iterations, rng):
    if method == "bootstrap":
        return bootstrap_interval(values, confidence_level, iterations, rng)
    elif method == "time-weighted":
        return time_weighted_interval(values, confidence_level)
    elif method == "normal":
        return normal_interval(values, confidence_level)
    raise ValueError(f"Unknown interval method: {method}")


def adjust_for_position_constraints(intervals, min_gap=MIN_POSITION_GAP):
    """
    Keep white-ball predictions ascending with at least min_gap between
    neighbours, shifting each moved position's interval along with it.
    Intervals are relabelled ball1..ball5 in their new ascending order.
    """
    white = sorted(intervals[:5], key=lambda iv: iv["prediction"])
    for label, iv in zip(POSITIONS, white):
        iv["position"] = label
    adjusted = make_distinct([iv["prediction"] for iv in white], min_gap=min_gap)
    for iv, new_value in zip(white, adjusted):
        shift = new_value - iv["prediction"]
        if shift:
            iv["prediction"] = new_value
            iv["upper"] = min(WHITE_BALL_MAX, iv["upper"] + shift)
            iv["lower"] = min(iv["upper"], max(WHITE_BALL_MIN, iv["lower"] + shift))
            iv["constraint_adjusted"] = True
    return white + intervals[5:]


def position_intervals(df, confidence_level=CONFIDENCE_LEVEL, method="bootstrap",
                       iterations=BOOTSTRAP_ITERATIONS, rng=None, include_constraints=True):
    """
    Prediction and interval for each of the six positions.

    Returns a list of six dicts: position, prediction, lower, upper, method,
    confidence_level.
    """
    if len(df) == 0:
        raise ValueError("Cannot build confidence intervals from an empty history")
    if rng is None:
        rng = get_rng(None)

    series = list(white_ball_matrix(df).T) + [powerball_array(df)]
    intervals = []
    for position, values in zip(POSITIONS, series):
        low, high = ((POWERBALL_MIN, POWERBALL_MAX) if position == "powerball"
                     else (WHITE_BALL_MIN, WHITE_BALL_MAX))
        result = _position_interval(values, method, confidence_level, iterations, rng)
        intervals.append({
            "position": position,
            "prediction": min(high, max(low, result["prediction"])),
            "lower": max(low, result["lower"]),
            "upper": min(high, result["upper"]),
            "method": method,
            "confidence_level": confidence_level,
        })

    if include_constraints:
        intervals = adjust_for_position_constraints(intervals)
    return intervals


def predict(df, options=None):
    """
    Predict five white balls and a powerball from per-position statistics.

    Options: confidence_level, interval_method, bootstrap_iterations, seed/rng.
    """
    options = options or {}
    confidence_level = options.get("confidence_level", CONFIDENCE_LEVEL)
    intervals = position_intervals(
        df,
        confidence_level=confidence_level,
        method=options.get("interval_method", "bootstrap"),
        iterations=options.get("bootstrap_iterations", BOOTSTRAP_ITERATIONS),
        rng=get_rng(options),
        include_constraints=options.get("include_constraints", True),
    )
    return make_prediction(
        [iv["prediction"] for iv in intervals[:5]],
        intervals[5]["prediction"],
        confidence_level,
        "confidence-intervals",
        intervals=intervals,
    )
