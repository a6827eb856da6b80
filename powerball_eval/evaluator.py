"""
Walk-Forward Strategy Evaluator

Replays every strategy draw by draw through each validation window. The
strategy predicting test draw i of a window sees the window's training
draws plus test draws 0..i-1 (an expanding window), never draw i itself
or anything after it. Each prediction is scored with the metrics library
and the scores are aggregated per window and across windows.

A strategy that raises on one prediction point loses only that point: the
failure is logged, counted and reported as a warning. Cancellation is
cooperative and checked before every prediction point; a cancelled run
returns whatever it gathered, marked cancelled.
"""
import logging
import numbers
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from datetime import datetime

import numpy as np
import pandas as pd

from powerball_eval.comparison import build_summary, compare
from powerball_eval.config import resolve_config
from powerball_eval.draws import row_to_draw, validate_draws
from powerball_eval.ensemble import combine_predictions, initial_weights, update_weight
from powerball_eval.errors import (
    ConcurrentEvaluationError, EvaluationCancelled, InsufficientDataError,
    StrategyPredictionError,
)
from powerball_eval.metrics import aggregate_predictions, calculate_draw_metrics
from powerball_eval.strategies import BUILTIN_STRATEGIES
from powerball_eval.strategies.base import resolve_predictor
from powerball_eval.windows import generate_windows

logger = logging.getLogger(__name__)


def history_up_to(window, i):
    """Training draws plus the first i test draws of a window."""
    if i == 0:
        return window["training_data"]
    return pd.concat([window["training_data"], window["test_data"].iloc[:i]])


def _is_integer(value):
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _check_prediction(prediction):
    """
    Validate strategy output and return a clean copy that can be scored.

    White balls and the powerball come back as plain ints, confidence as a
    float (0.0 when missing) and intervals as a list of dicts that each
    carry numeric lower and upper bounds.
    """
    if not isinstance(prediction, dict):
        raise TypeError(f"strategy returned {type(prediction).__name__}, expected dict")
    balls = prediction.get("white_balls")
    if balls is None or isinstance(balls, (str, bytes, dict)):
        raise ValueError(f"invalid white_balls in prediction: {balls!r}")
    balls = list(balls)
    if len(balls) > 5:
        raise ValueError(f"invalid white_balls in prediction: {balls!r}")
    for ball in balls:
        if not _is_integer(ball):
            raise ValueError(f"white ball {ball!r} is not an integer")

    pb = prediction.get("powerball")
    if pb is not None and not _is_integer(pb):
        raise ValueError(f"powerball {pb!r} is not an integer")

    confidence = prediction.get("confidence")
    confidence = 0.0 if confidence is None else float(confidence)
    if not np.isfinite(confidence):
        raise ValueError(f"confidence {confidence!r} is not finite")

    intervals = prediction.get("intervals")
    if intervals is not None:
        intervals = list(intervals)
        for interval in intervals:
            if not isinstance(interval, dict) or not all(
                    isinstance(interval.get(bound), numbers.Real) for bound in ("lower", "upper")):
                raise ValueError(f"interval {interval!r} needs numeric lower and upper bounds")

    clean = dict(prediction)
    clean["white_balls"] = [int(b) for b in balls]
    clean["powerball"] = None if pb is None else int(pb)
    clean["confidence"] = confidence
    if intervals is not None:
        clean["intervals"] = intervals
    return clean


def replay_window(predict_fn, window, strategy_name, options, failures, should_stop=None):
    """
    Predict and score every test draw of one window.

    Failed points are appended to failures as StrategyPredictionError and
    skipped. Raises EvaluationCancelled (carrying the points scored so far)
    when should_stop() turns true.
    """
    test_data = window["test_data"]
    predictions = []
    for i in range(len(test_data)):
        if should_stop is not None and should_stop():
            raise EvaluationCancelled(partial=predictions)

        history = history_up_to(window, i)
        actual = row_to_draw(test_data.iloc[i])
        try:
            prediction = _check_prediction(predict_fn(history, dict(options)))
            metrics = calculate_draw_metrics(prediction, actual)
        except Exception as e:
            error = StrategyPredictionError(strategy_name, window["period"], i, e)
            logger.warning("%s", error)
            failures.append(error)
            continue

        predictions.append({
            "period": window["period"],
            "draw_index": i,
            "strategy": strategy_name,
            "predicted": prediction,
            "actual": actual,
            "metrics": metrics,
            "timestamp": actual["date"],
        })
    return predictions


def summarize_window(window, predictions, failed):
    """Per-window statistics for one strategy."""
    matches = np.array([p["metrics"]["white_ball_matches"] for p in predictions], dtype=float)
    n = len(matches)
    return {
        "period": window["period"],
        "training_size": len(window["training_data"]),
        "test_size": len(window["test_data"]),
        "predictions": n,
        "failed": failed,
        "average_matches": float(matches.mean()) if n else 0.0,
        "hit_rate": float((matches >= 3).mean()) if n else 0.0,
        "win_rate": (sum(1 for p in predictions if p["metrics"]["is_winning_ticket"]) / n
                     if n else 0.0),
    }


def cross_window_stats(window_summaries):
    """Spread of per-window results; windows without predictions are left out."""
    scored = [w for w in window_summaries if w["predictions"] > 0]
    if not scored:
        return {"windows": 0, "mean_average_matches": 0.0, "std_average_matches": 0.0,
                "mean_hit_rate": 0.0, "std_hit_rate": 0.0}
    avg = np.array([w["average_matches"] for w in scored])
    hit = np.array([w["hit_rate"] for w in scored])
    return {
        "windows": len(scored),
        "mean_average_matches": float(avg.mean()),
        "std_average_matches": float(avg.std()),
        "mean_hit_rate": float(hit.mean()),
        "std_hit_rate": float(hit.std()),
    }


class StrategyEvaluator:
    """
    One evaluation session: configuration, MethodWeights and run state.

    The instance is not reentrant. A second run() while one is in progress
    raises ConcurrentEvaluationError.
    """

    def __init__(self, config=None, **overrides):
        self.config = resolve_config(config, **overrides)
        self.method_weights = {}
        self.weight_history = []
        self.run_history = []
        self.current_progress = 0.0
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()

    # ── Session state ──────────────────────────────────────────────────

    @property
    def is_running(self):
        return self._lock.locked()

    def cancel(self):
        """Ask the running evaluation to stop before its next prediction point."""
        self._cancel_event.set()

    def is_cancelled(self):
        return self._cancel_event.is_set()

    def get_status(self):
        return {
            "is_running": self.is_running,
            "progress": self.current_progress,
            "method_weights": dict(self.method_weights),
            "runs_completed": len(self.run_history),
        }

    def strategy_options(self, name):
        """Options handed to a strategy's predict call."""
        options = {
            "confidence_level": self.config["confidence_level"],
            "bootstrap_iterations": self.config["bootstrap_iterations"],
            "seed": self.config["seed"],
        }
        options.update(self.config["strategy_options"].get(name, {}))
        return options

    # ── Replay ─────────────────────────────────────────────────────────

    def _replay_task(self, task):
        name, predict_fn, window = task
        failures = []
        cancelled = False
        try:
            predictions = replay_window(
                predict_fn, window, name, self.strategy_options(name), failures,
                should_stop=self.is_cancelled,
            )
        except EvaluationCancelled as e:
            predictions = e.partial
            cancelled = True
        return {
            "strategy": name,
            "window": window,
            "predictions": predictions,
            "failures": failures,
            "cancelled": cancelled,
        }

    def _run_tasks(self, tasks):
        """Yield replay outcomes in task order, in threads when max_workers > 1."""
        if self.config["max_workers"] > 1 and len(tasks) > 1:
            with ThreadPoolExecutor(max_workers=self.config["max_workers"]) as executor:
                yield from executor.map(self._replay_task, tasks)
        else:
            for task in tasks:
                yield self._replay_task(task)

    def _aggregate(self, name, bucket, metrics_requested=None):
        config = self.config
        result = aggregate_predictions(
            bucket["predictions"],
            strategy=name,
            confidence_level=config["confidence_level"],
            metrics_requested=config["metrics"] if metrics_requested is None else metrics_requested,
            score_weights=config["score_weights"],
            mae_normalizer=config["mae_normalizer"],
        )
        result["failed_predictions"] = len(bucket["failures"])
        result["windows"] = bucket["windows"]
        result["cross_window"] = cross_window_stats(bucket["windows"])
        result["predictions"] = bucket["predictions"]
        result["cancelled"] = bucket["cancelled"]
        return result

    def _evaluate_strategies(self, strategies, windows, progress=None, metrics_requested=None):
        """
        Replay each strategy over every window.

        Returns ({name: AggregatedResult}, failures, cancelled).
        """
        tasks = [(name, resolve_predictor(strategy), window)
                 for name, strategy in strategies.items() for window in windows]
        buckets = {}
        failures = []
        cancelled = False

        with closing(self._run_tasks(tasks)) as outcomes:
            for outcome in outcomes:
                name = outcome["strategy"]
                if name not in buckets:
                    logger.info("Testing strategy: %s", name)
                    buckets[name] = {"predictions": [], "windows": [], "failures": [],
                                     "cancelled": False}
                bucket = buckets[name]
                bucket["predictions"].extend(outcome["predictions"])
                bucket["failures"].extend(outcome["failures"])
                failures.extend(outcome["failures"])
                bucket["windows"].append(
                    summarize_window(outcome["window"], outcome["predictions"],
                                     len(outcome["failures"]))
                )
                if progress is not None:
                    progress(name, outcome["window"])
                if outcome["cancelled"]:
                    bucket["cancelled"] = True
                    cancelled = True
                    break

        results = {name: self._aggregate(name, bucket, metrics_requested)
                   for name, bucket in buckets.items()}
        return results, failures, cancelled

    def evaluate_strategy(self, name, strategy, windows, metrics_requested=None):
        """
        Evaluate one strategy over prepared validation windows.

        Returns its AggregatedResult. Does not touch the session weights.
        """
        windows = list(windows)
        results, _, _ = self._evaluate_strategies(
            {name: strategy}, windows, metrics_requested=metrics_requested,
        )
        if name not in results:
            bucket = {"predictions": [], "windows": [], "failures": [], "cancelled": False}
            return self._aggregate(name, bucket, metrics_requested)
        return results[name]

    def _evaluate_ensemble(self, per_strategy, windows, progress=None):
        """Score the weighted vote of every strategy's logged predictions."""
        lookups = {
            name: {(p["period"], p["draw_index"]): p["predicted"] for p in result["predictions"]}
            for name, result in per_strategy.items()
        }
        bucket = {"predictions": [], "windows": [], "failures": [], "cancelled": False}

        for window in windows:
            window_predictions = []
            skipped = 0
            for i in range(len(window["test_data"])):
                if self.is_cancelled():
                    bucket["cancelled"] = True
                    break
                key = (window["period"], i)
                method_predictions = [
                    {"strategy": name, "weight": self.method_weights.get(name, 0.0),
                     "prediction": lookup[key]}
                    for name, lookup in lookups.items() if key in lookup
                ]
                if not method_predictions:
                    skipped += 1
                    continue
                combined = combine_predictions(method_predictions)
                actual = row_to_draw(window["test_data"].iloc[i])
                window_predictions.append({
                    "period": window["period"],
                    "draw_index": i,
                    "strategy": "ensemble",
                    "predicted": combined,
                    "actual": actual,
                    "metrics": calculate_draw_metrics(combined, actual),
                    "timestamp": actual["date"],
                    "contributing_methods": len(method_predictions),
                })
            bucket["predictions"].extend(window_predictions)
            bucket["windows"].append(summarize_window(window, window_predictions, skipped))
            if progress is not None:
                progress("ensemble", window)
            if bucket["cancelled"]:
                break

        result = self._aggregate("ensemble", bucket)
        result["weights"] = dict(self.method_weights)
        return result, bucket["cancelled"]

    # ── Full run ───────────────────────────────────────────────────────

    def run(self, draws, strategies=None, progress_callback=None):
        """
        Walk-forward evaluation of every strategy, plus the ensemble.

        Parameters
        ----------
        draws : DataFrame or sequence of {date, white_balls, powerball} mappings,
            in chronological order. Invalid draws are excluded and reported.
        strategies : {name: predict callable or object with .predict}.
            Defaults to the built-in strategies.
        progress_callback : optional callable receiving
            {progress_percent, current_strategy, current_window, total_windows}
            at every window boundary.

        Returns
        -------
        EvaluationResult dict.

        Raises
        ------
        InsufficientDataError, ConcurrentEvaluationError
        """
        if not self._lock.acquire(blocking=False):
            raise ConcurrentEvaluationError("An evaluation is already running on this evaluator")
        try:
            self._cancel_event.clear()
            self.current_progress = 0.0
            return self._run(draws, strategies, progress_callback)
        finally:
            self._lock.release()

    def _run(self, draws, strategies, progress_callback):
        config = self.config
        started_at = datetime.now()

        clean, data_report = validate_draws(draws)
        required = config["min_training_size"] + config["test_window_size"]
        if len(clean) < required:
            raise InsufficientDataError(len(clean), required)

        strategies = dict(BUILTIN_STRATEGIES if strategies is None else strategies)
        if not strategies:
            raise ValueError("At least one strategy is required")

        windows = list(generate_windows(
            clean,
            config["min_training_size"],
            config["test_window_size"],
            config["step_size"],
            config["max_validation_periods"],
        ))
        names = list(strategies)
        logger.info("Starting evaluation of %d strategies over %d windows (%d draws)",
                    len(names), len(windows), len(clean))

        total_steps = len(windows) * (len(names) + (1 if config["include_ensemble"] else 0))
        step = 0

        def progress(name, window):
            nonlocal step
            step += 1
            self.current_progress = 100.0 * step / total_steps
            if progress_callback is not None:
                progress_callback({
                    "progress_percent": self.current_progress,
                    "current_strategy": name,
                    "current_window": window["period"],
                    "total_windows": len(windows),
                })

        self.method_weights = initial_weights(names, config["initial_weights"])
        self.weight_history = [{"after": None, "weights": dict(self.method_weights)}]

        per_strategy, failures, cancelled = self._evaluate_strategies(strategies, windows, progress)

        # Weight updates wait until every strategy score is known
        if config["adaptive_weighting"]:
            for name in names:
                result = per_strategy.get(name)
                if result is None or result["cancelled"]:
                    continue
                self.method_weights = update_weight(
                    self.method_weights, name, result["overall_score"],
                    learning_rate=config["learning_rate"],
                    min_weight=config["min_weight"],
                    max_weight=config["max_weight"],
                )
                self.weight_history.append({"after": name, "weights": dict(self.method_weights)})

        ensemble = None
        if config["include_ensemble"] and not cancelled:
            ensemble, cancelled = self._evaluate_ensemble(per_strategy, windows, progress)

        comparison = compare(per_strategy, config["significance_threshold"])
        summary = build_summary(per_strategy, ensemble, comparison, self.method_weights,
                                len(windows))
        finished_at = datetime.now()

        if cancelled:
            logger.info("Evaluation cancelled after %d predictions", summary["total_predictions"])
        else:
            logger.info("Evaluation completed: %d predictions", summary["total_predictions"])

        result = {
            "per_strategy": per_strategy,
            "ensemble": ensemble,
            "ranking": comparison["ranking"],
            "best_strategy": comparison["best_strategy"],
            "significance": comparison["significance"],
            "total_predictions": summary["total_predictions"],
            "key_findings": summary["key_findings"],
            "summary": summary,
            "weights": dict(self.method_weights),
            "weight_history": list(self.weight_history),
            "windows": {
                "count": len(windows),
                "min_training_size": config["min_training_size"],
                "test_window_size": config["test_window_size"],
                "step_size": config["step_size"],
                "periods": [
                    {k: w[k] for k in ("period", "training_start", "training_end",
                                       "test_start", "test_end")}
                    for w in windows
                ],
            },
            "data": data_report,
            "warnings": [str(f) for f in failures],
            "cancelled": cancelled,
            "config": config,
            "started_at": started_at,
            "finished_at": finished_at,
            "duration_seconds": (finished_at - started_at).total_seconds(),
        }
        self.run_history.append({
            "finished_at": finished_at,
            "best_strategy": summary["best_strategy"],
            "weights": dict(self.method_weights),
        })
        return result


def evaluate(strategy, validation_windows, metrics_requested=None, name=None, config=None):
    """
    Evaluate one strategy over validation windows with a throwaway session.

    Returns the strategy's AggregatedResult.
    """
    if name is None:
        name = getattr(strategy, "__name__", None) or type(strategy).__name__
    evaluator = StrategyEvaluator(config)
    return evaluator.evaluate_strategy(name, strategy, validation_windows, metrics_requested)
