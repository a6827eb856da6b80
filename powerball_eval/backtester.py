"""
Powerball Walk-Forward Backtesting Engine

Entry point for a full evaluation run: every strategy is replayed draw by
draw through rolling validation windows (training always strictly before
testing), scored, ranked and combined into a weighted ensemble.

Only InsufficientDataError and ConcurrentEvaluationError escape a run;
strategy failures, invalid draws and cancellation are reported on the
result instead.
"""

import logging
import os

import pandas as pd

from powerball_eval.comparison import print_summary
from powerball_eval.evaluator import StrategyEvaluator

logger = logging.getLogger(__name__)


def run_evaluation(draws, strategies=None, config=None, progress_callback=None,
                   verbose=False, evaluator=None):
    """
    Run a walk-forward evaluation.

    Parameters
    ----------
    draws : DataFrame (date, wb1-wb5, powerball) or sequence of
        {date, white_balls, powerball} mappings, oldest first
    strategies : {name: predict}, defaults to the built-in strategies
    config : dict of overrides for DEFAULT_CONFIG
    progress_callback : called at every window boundary
    verbose : print a console report when done
    evaluator : reuse an existing StrategyEvaluator session (config is then ignored)

    Returns
    -------
    EvaluationResult dict.
    """
    if evaluator is None:
        evaluator = StrategyEvaluator(config)

    if verbose:
        cfg = evaluator.config
        print(f"\n{'='*60}")
        print("POWERBALL WALK-FORWARD EVALUATION")
        print(f"{'='*60}")
        print(f"Training size: {cfg['min_training_size']}")
        print(f"Test window: {cfg['test_window_size']}  Step: {cfg['step_size']}  "
              f"Max periods: {cfg['max_validation_periods']}")
        print(f"{'='*60}\n")

    result = evaluator.run(draws, strategies, progress_callback)

    if verbose:
        print_summary(result)
    return result


def prediction_log_frame(result):
    """Flatten every prediction log of a result into one DataFrame."""
    rows = []
    logs = [(name, res) for name, res in result["per_strategy"].items()]
    if result.get("ensemble") is not None:
        logs.append(("ensemble", result["ensemble"]))

    for name, res in logs:
        for p in res["predictions"]:
            m = p["metrics"]
            rows.append({
                "strategy": name,
                "period": p["period"],
                "draw_index": p["draw_index"],
                "date": p["actual"]["date"],
                "predicted": str(p["predicted"]["white_balls"]),
                "predicted_powerball": p["predicted"].get("powerball"),
                "actual": str(p["actual"]["white_balls"]),
                "actual_powerball": p["actual"]["powerball"],
                "confidence": p["predicted"].get("confidence"),
                "matches": m["white_ball_matches"],
                "powerball_match": m["powerball_match"],
                "prize_tier": m["prize_tier"],
                "mean_absolute_error": m["mean_absolute_error"],
                "confidence_accuracy": m["confidence_accuracy"],
            })
    return pd.DataFrame(rows)


def save_results(result, path):
    """
    Save the prediction logs of a result to CSV.

    Returns the path written, or None when there was nothing to save.
    """
    log_df = prediction_log_frame(result)
    if log_df.empty:
        logger.info("No predictions to save")
        return None
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    log_df.to_csv(path, index=False)
    logger.info("Saved %d prediction rows to %s", len(log_df), path)
    return path


if __name__ == "__main__":
    from powerball_eval.draws import synthetic_draws
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_evaluation(synthetic_draws(300), verbose=True)
