"""
Adaptive Weighting and Ensemble Combination

Each evaluation session keeps its own MethodWeights: a {strategy: weight}
map that always sums to 1. After a strategy's full walk-forward run its
weight moves toward or away from the mean by

    adjustment = (observed_score - mean(weights)) * learning_rate

is clamped to [min_weight, max_weight] and the map is renormalised. The
bounds are applied before renormalising, so a weight can end slightly
outside them afterwards.

The ensemble is a weighted plurality vote: each strategy adds its weight
to every distinct ball it picked, and the five best-voted balls win.
Ties go to the lower number.
"""

from powerball_eval.config import (
    LEARNING_RATE, MAX_METHOD_WEIGHT, MIN_METHOD_WEIGHT,
    POWERBALL_MAX, POWERBALL_MIN, WHITE_BALL_MAX, WHITE_BALL_MIN, WHITE_BALLS_PER_DRAW,
)
from powerball_eval.strategies.base import make_prediction


def normalize_weights(weights):
    """Scale weights to sum to 1; all-zero input becomes uniform."""
    if not weights:
        return {}
    total = sum(weights.values())
    if total <= 0:
        return {name: 1.0 / len(weights) for name in weights}
    return {name: w / total for name, w in weights.items()}


def initial_weights(strategy_names, prior=None):
    """
    Starting MethodWeights for a session.

    Uniform unless a prior {name: weight} is given; names missing from the
    prior get the mean prior weight.
    """
    names = list(strategy_names)
    if not names:
        return {}
    if not prior:
        return {name: 1.0 / len(names) for name in names}
    known = [float(prior[n]) for n in names if n in prior]
    fill = sum(known) / len(known) if known else 1.0
    return normalize_weights({name: float(prior.get(name, fill)) for name in names})


def update_weight(weights, strategy_name, observed_score, learning_rate=LEARNING_RATE,
                  min_weight=MIN_METHOD_WEIGHT, max_weight=MAX_METHOD_WEIGHT):
    """
    Return a new weight map after one strategy's observed score.

    The input map is not modified. A strategy not yet in the map enters at
    the current mean weight before the adjustment.
    """
    updated = dict(weights)
    if strategy_name not in updated:
        updated[strategy_name] = (sum(updated.values()) / len(updated)) if updated else 1.0

    avg_score = sum(updated.values()) / len(updated)
    adjustment = (observed_score - avg_score) * learning_rate
    current = updated[strategy_name]
    updated[strategy_name] = max(min_weight, min(max_weight, current + adjustment))

    return normalize_weights(updated)


def combine_predictions(method_predictions, count=WHITE_BALLS_PER_DRAW):
    """
    Combine strategy predictions by weighted plurality vote.

    Parameters
    ----------
    method_predictions : list of dicts {strategy, weight, prediction}

    Returns
    -------
    PredictionResult dict with method "ensemble". White balls are returned
    ascending; the powerball is None if no strategy supplied one.
    """
    ball_votes = {}
    powerball_votes = {}
    weighted_confidence = 0.0
    total_weight = 0.0

    for entry in method_predictions:
        weight = float(entry["weight"])
        prediction = entry["prediction"]
        balls = prediction.get("white_balls")
        for ball in set(int(b) for b in (balls if balls is not None else [])):
            if WHITE_BALL_MIN <= ball <= WHITE_BALL_MAX:
                ball_votes[ball] = ball_votes.get(ball, 0.0) + weight
        pb = prediction.get("powerball")
        if pb is not None and POWERBALL_MIN <= pb <= POWERBALL_MAX:
            powerball_votes[pb] = powerball_votes.get(pb, 0.0) + weight
        confidence = prediction.get("confidence")
        weighted_confidence += weight * (float(confidence) if confidence is not None else 0.0)
        total_weight += weight

    ranked_balls = sorted(ball_votes.items(), key=lambda item: (-item[1], item[0]))
    white_balls = sorted(ball for ball, _ in ranked_balls[:count])

    ranked_pb = sorted(powerball_votes.items(), key=lambda item: (-item[1], item[0]))
    powerball = ranked_pb[0][0] if ranked_pb else None

    return make_prediction(
        white_balls,
        powerball,
        weighted_confidence / total_weight if total_weight > 0 else 0.0,
        "ensemble",
        votes=dict(ranked_balls),
        contributing_methods=[entry["strategy"] for entry in method_predictions],
    )
