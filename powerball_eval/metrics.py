"""
Metrics Library for Powerball prediction scoring

Pure functions that score a prediction against the draw it tried to guess
and aggregate those scores over many predictions. Prize tiers follow the
Powerball table; the overall score is the weighted blend
0.4 * matches/5 + 0.3 * hit rate + 0.2 * win rate + 0.1 * position term.
"""
import numpy as np

from powerball_eval.config import (
    ALL_METRICS, CONFIDENCE_LEVEL, EXPECTED_TIER_ODDS, HIT_THRESHOLD, MAE_NORMALIZER,
    OVERALL_SCORE_WEIGHTS, PRIZE_TIERS, PRIZE_VALUES, TICKET_COST, WHITE_BALLS_PER_DRAW,
)


def count_matches(predicted, actual):
    """Count how many white balls match between a guess and a draw."""
    if not predicted or not actual:
        return 0
    return len(set(predicted) & set(actual))


def determine_prize_tier(white_ball_matches, powerball_match):
    """Map (matches, powerball hit) to a prize tier name, or None for no prize."""
    if white_ball_matches == 5 and powerball_match:
        return "jackpot"
    elif white_ball_matches == 5:
        return "match5"
    elif white_ball_matches == 4 and powerball_match:
        return "match4plus"
    elif white_ball_matches == 4:
        return "match4"
    elif white_ball_matches == 3 and powerball_match:
        return "match3plus"
    elif white_ball_matches == 3:
        return "match3"
    elif white_ball_matches == 2 and powerball_match:
        return "match2plus"
    elif white_ball_matches == 1 and powerball_match:
        return "match1plus"
    elif powerball_match:
        return "powerball"
    return None


def compute_position_errors(predicted, actual):
    """Absolute error per sorted position, over the positions the guess supplies."""
    sorted_predicted = sorted(predicted or [])
    sorted_actual = sorted(actual or [])
    return [abs(p - a) for p, a in zip(sorted_predicted, sorted_actual)]


def assess_interval_coverage(intervals, actual_white_balls):
    """
    Fraction of white-ball positions whose actual value fell inside the
    predicted interval.

    Returns (within_interval, accuracy), or (None, None) when no white-ball
    intervals are available.
    """
    if not intervals:
        return None, None
    positions = intervals[:WHITE_BALLS_PER_DRAW]
    sorted_actual = sorted(actual_white_balls)
    within = 0
    compared = 0
    for interval, actual_value in zip(positions, sorted_actual):
        compared += 1
        if interval["lower"] <= actual_value <= interval["upper"]:
            within += 1
    if compared == 0:
        return None, None
    return within, within / compared


def calculate_draw_metrics(prediction, actual):
    """
    Score one PredictionResult against the actual draw.

    Parameters
    ----------
    prediction : dict with white_balls, powerball and optional intervals
    actual     : dict with white_balls and powerball

    Returns
    -------
    DrawMetrics dict.
    """
    balls = prediction.get("white_balls")
    predicted_balls = [int(b) for b in balls] if balls is not None else []
    matches = count_matches(predicted_balls, actual["white_balls"])
    pb = prediction.get("powerball")
    powerball_match = pb is not None and int(pb) == int(actual["powerball"])
    prize_tier = determine_prize_tier(matches, powerball_match)

    position_errors = compute_position_errors(predicted_balls, actual["white_balls"])
    mae = float(np.mean(position_errors)) if position_errors else None

    within, coverage = assess_interval_coverage(prediction.get("intervals"), actual["white_balls"])

    return {
        "white_ball_matches": matches,
        "powerball_match": powerball_match,
        "prize_tier": prize_tier,
        "position_errors": position_errors,
        "mean_absolute_error": mae,
        "confidence_accuracy": coverage,
        "within_interval": within,
        "is_winning_ticket": prize_tier is not None,
    }


def compute_consistency(values):
    """
    Consistency = max(0, 1 - std/mean) of the match counts.

    A zero mean gives zero consistency instead of dividing by zero.
    """
    if len(values) == 0:
        return {"mean": 0.0, "variance": 0.0, "standard_deviation": 0.0,
                "coefficient_of_variation": None, "consistency_score": 0.0}
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    variance = float(arr.var())
    std = float(np.sqrt(variance))
    if mean > 0:
        cv = std / mean
        score = max(0.0, 1.0 - cv)
    else:
        cv = None
        score = 0.0
    return {
        "mean": mean,
        "variance": variance,
        "standard_deviation": std,
        "coefficient_of_variation": cv,
        "consistency_score": score,
    }


def match_distribution(matches):
    """Count of predictions at each match level 0..5."""
    dist = {m: 0 for m in range(WHITE_BALLS_PER_DRAW + 1)}
    for m in matches:
        dist[int(m)] = dist.get(int(m), 0) + 1
    return dist


def prize_tier_counts(tiers, total_predictions):
    """Count, observed rate and official expected rate for every prize tier."""
    counts = {tier: 0 for tier in PRIZE_TIERS}
    for tier in tiers:
        if tier is not None:
            counts[tier] += 1
    return {
        tier: {
            "count": count,
            "rate": count / total_predictions if total_predictions else 0.0,
            "expected_rate": EXPECTED_TIER_ODDS[tier],
        }
        for tier, count in counts.items()
    }


def compute_expected_value(tiers, total_predictions, ticket_cost=TICKET_COST):
    """Prize value won versus ticket spend, using the fixed prize table."""
    total_cost = total_predictions * ticket_cost
    total_value = float(sum(PRIZE_VALUES[t] for t in tiers if t is not None))
    if total_predictions == 0:
        return {"total_cost": 0.0, "total_prize_value": 0.0, "roi": 0.0,
                "average_ticket_value": 0.0}
    return {
        "total_cost": total_cost,
        "total_prize_value": total_value,
        "roi": (total_value - total_cost) / total_cost,
        "average_ticket_value": total_value / total_predictions,
    }


def compute_overall_score(average_matches, hit_rate, win_rate, mean_absolute_error,
                          weights=None, mae_normalizer=MAE_NORMALIZER):
    """Weighted blend of the four headline metrics, in [0, 1]."""
    w = dict(OVERALL_SCORE_WEIGHTS)
    if weights:
        w.update(weights)
    position_term = min(1.0, max(0.0, 1.0 - mean_absolute_error / mae_normalizer))
    return (
        w["matches"] * (average_matches / WHITE_BALLS_PER_DRAW)
        + w["hit_rate"] * hit_rate
        + w["win_rate"] * win_rate
        + w["position"] * position_term
    )


def empty_aggregate(strategy=None):
    """Zeroed AggregatedResult for a strategy that produced no predictions."""
    return {
        "strategy": strategy,
        "total_predictions": 0,
        "average_matches": 0.0,
        "std_matches": 0.0,
        "max_matches": 0,
        "min_matches": 0,
        "hit_rate": 0.0,
        "win_rate": 0.0,
        "powerball_hit_rate": 0.0,
        "consistency": 0.0,
        "consistency_detail": None,
        "mean_absolute_error": None,
        "confidence_calibration": None,
        "calibration_error": None,
        "prize_tiers": None,
        "match_distribution": match_distribution([]),
        "expected_value": None,
        "overall_score": 0.0,
    }


def aggregate_predictions(predictions, strategy=None, confidence_level=CONFIDENCE_LEVEL,
                          metrics_requested=None, score_weights=None,
                          mae_normalizer=MAE_NORMALIZER):
    """
    Aggregate a prediction log into an AggregatedResult.

    Parameters
    ----------
    predictions : list of dicts, each with a "metrics" DrawMetrics entry
    metrics_requested : iterable of metric names; core match metrics and the
        overall score are always computed, the rest are optional blocks.

    Returns
    -------
    dict (AggregatedResult). No predictions gives zeroed metrics.
    """
    requested = set(ALL_METRICS if metrics_requested is None else metrics_requested)
    if not predictions:
        return empty_aggregate(strategy)

    metrics = [p["metrics"] for p in predictions]
    total = len(metrics)
    matches = np.array([m["white_ball_matches"] for m in metrics], dtype=float)
    tiers = [m["prize_tier"] for m in metrics]

    average_matches = float(matches.mean())
    hit_rate = float((matches >= HIT_THRESHOLD).sum()) / total
    win_rate = sum(1 for t in tiers if t is not None) / total
    powerball_hit_rate = sum(1 for m in metrics if m["powerball_match"]) / total

    maes = [m["mean_absolute_error"] for m in metrics if m["mean_absolute_error"] is not None]
    mae = float(np.mean(maes)) if maes else float(mae_normalizer)

    consistency = compute_consistency(matches)

    result = {
        "strategy": strategy,
        "total_predictions": total,
        "average_matches": average_matches,
        "std_matches": consistency["standard_deviation"],
        "max_matches": int(matches.max()),
        "min_matches": int(matches.min()),
        "hit_rate": hit_rate,
        "win_rate": win_rate,
        "powerball_hit_rate": powerball_hit_rate,
        "consistency": consistency["consistency_score"],
        "consistency_detail": consistency if "consistency" in requested else None,
        "mean_absolute_error": mae,
        "confidence_calibration": None,
        "calibration_error": None,
        "prize_tiers": prize_tier_counts(tiers, total) if "prize-tiers" in requested else None,
        "match_distribution": match_distribution(matches.astype(int)),
        "expected_value": (compute_expected_value(tiers, total)
                           if "expected-value" in requested else None),
        "overall_score": compute_overall_score(
            average_matches, hit_rate, win_rate, mae, score_weights, mae_normalizer
        ),
    }

    if "confidence-accuracy" in requested:
        coverage = [m["confidence_accuracy"] for m in metrics if m["confidence_accuracy"] is not None]
        if coverage:
            average_accuracy = float(np.mean(coverage))
            calibration_error = abs(average_accuracy - confidence_level)
            result["confidence_calibration"] = {
                "average_accuracy": average_accuracy,
                "expected_accuracy": confidence_level,
                "calibration_error": calibration_error,
                "total_evaluated": len(coverage),
            }
            result["calibration_error"] = calibration_error

    return result
