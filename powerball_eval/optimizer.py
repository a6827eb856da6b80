"""
Parameter Optimization Engine

Searches strategy parameters (energy weights, offsets, or both) by
scoring each candidate over expanding time-series cross-validation splits.
Candidates are replayed through the same StrategyEvaluator used for full
evaluations, so they see exactly the same expanding-window history.

Search methods:
- random: seeded random candidates
- grid:   deterministic lattice (weights, offsets only)
"""

import logging
import threading
from itertools import product

import numpy as np

from powerball_eval.config import DEFAULT_SEED, WHITE_BALL_MAX
from powerball_eval.draws import validate_draws
from powerball_eval.errors import ConcurrentEvaluationError, InsufficientDataError
from powerball_eval.evaluator import StrategyEvaluator
from powerball_eval.strategies import energy, offsets
from powerball_eval.strategies.base import make_prediction
from powerball_eval.strategies.confidence_interval import z_score
from powerball_eval.windows import create_cv_splits

logger = logging.getLogger(__name__)

OPTIMIZATION_KINDS = ("weights", "offsets", "hybrid")
SEARCH_METHODS = ("random", "grid")

# Fixed reference point for the improvement figures
BASELINE_HIT_RATE = 0.1
BASELINE_AVERAGE_MATCHES = 1.2

NUM_OFFSETS = 8
OFFSET_RANGE = (1, WHITE_BALL_MAX - 1)
MIN_SPREAD = 3
MAX_SPREAD = 15
WEIGHT_KEYS = list(energy.DEFAULT_ENERGY_WEIGHTS)
GRID_STEPS = 4


def offset_energy_predict(df, options=None):
    """Offset picks first, then energy picks, five distinct numbers."""
    options = options or {}
    offset_pred = offsets.predict(df, options)
    energy_pred = energy.predict(df, options)
    chosen = []
    for n in offset_pred["white_balls"] + energy_pred["white_balls"]:
        if n not in chosen:
            chosen.append(n)
    return make_prediction(chosen[:5], offset_pred["powerball"], 0.80, "offset-energy")


PREDICTORS = {
    "weights": energy.predict,
    "offsets": offsets.predict,
    "hybrid": offset_energy_predict,
}


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------

def random_offsets(rng, num_offsets=NUM_OFFSETS, offset_range=OFFSET_RANGE):
    low, high = offset_range
    values = rng.choice(np.arange(low, high + 1), size=num_offsets, replace=False)
    return sorted(int(v) for v in values)


def random_weights(rng):
    raw = rng.random(len(WEIGHT_KEYS))
    raw = raw / raw.sum()
    return {key: float(w) for key, w in zip(WEIGHT_KEYS, raw)}


def weight_lattice(steps=GRID_STEPS):
    """Every weight vector on the simplex with coordinates in multiples of 1/steps."""
    lattice = []
    for combo in product(range(steps + 1), repeat=len(WEIGHT_KEYS)):
        if sum(combo) == steps:
            lattice.append({key: c / steps for key, c in zip(WEIGHT_KEYS, combo)})
    return lattice


def grid_offsets(iteration, num_offsets=NUM_OFFSETS, offset_range=OFFSET_RANGE,
                 min_spread=MIN_SPREAD, max_spread=MAX_SPREAD):
    """Evenly spread offsets; the spread cycles fastest, then the start moves up."""
    low, high = offset_range
    span = high - low + 1
    spreads = max_spread - min_spread + 1
    spread = min_spread + iteration % spreads
    start = low + (iteration // spreads) % span
    values = {(start - low + k * spread) % span + low for k in range(num_offsets)}
    return sorted(values)


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------

class ParameterOptimizer:
    """
    Random or grid search over one kind of strategy parameter.

    Not reentrant: calling optimize() while another optimize() is running
    on the same instance raises ConcurrentEvaluationError.
    """

    def __init__(self, kind="hybrid", config=None):
        if kind not in OPTIMIZATION_KINDS:
            raise ValueError(f"Unknown optimization type: {kind}")
        self.kind = kind
        self.evaluator = StrategyEvaluator(config, metrics=["consistency"])
        self.results = []
        self.best_params = None
        self._lock = threading.Lock()

    @property
    def is_running(self):
        return self._lock.locked()

    def get_status(self):
        return {
            "is_running": self.is_running,
            "type": self.kind,
            "results_count": len(self.results),
            "has_best_params": self.best_params is not None,
            "best_params": self.best_params,
        }

    def _sample(self, method, iteration, rng, lattice):
        if method == "grid":
            if self.kind == "weights":
                return {"energy_weights": lattice[iteration % len(lattice)]}
            return {"offsets": grid_offsets(iteration)}
        if self.kind == "weights":
            return {"energy_weights": random_weights(rng)}
        if self.kind == "offsets":
            return {"offsets": random_offsets(rng)}
        return {"offsets": random_offsets(rng), "energy_weights": random_weights(rng)}

    def evaluate_params(self, params, splits):
        """Performance of one parameter set averaged across the CV folds."""
        predictor = PREDICTORS[self.kind]

        def candidate(df, options):
            return predictor(df, {**options, **params})

        result = self.evaluator.evaluate_strategy(self.kind, candidate, splits)
        folds = [w for w in result["windows"] if w["predictions"] > 0]
        if not folds:
            return {"hit_rate": 0.0, "average_matches": 0.0, "max_matches": 0,
                    "consistency": 0.0, "total_predictions": 0, "fold_variance": 0.0,
                    "overall_score": 0.0}

        hit_rates = np.array([w["hit_rate"] for w in folds])
        return {
            "hit_rate": float(hit_rates.mean()),
            "average_matches": float(np.mean([w["average_matches"] for w in folds])),
            "max_matches": result["max_matches"],
            "consistency": result["consistency"],
            "total_predictions": result["total_predictions"],
            "fold_variance": float(hit_rates.std()),
            "overall_score": result["overall_score"],
        }

    def optimize(self, draws, method="random", iterations=100, folds=5, seed=DEFAULT_SEED,
                 progress_callback=None):
        """
        Search for the best parameters.

        Parameters
        ----------
        draws : draw frame or records, oldest first
        method : "random" or "grid" (grid is not available for hybrid)
        iterations : number of candidates to score
        folds : number of expanding CV splits
        seed : seed for random search
        progress_callback : optional, called after each candidate with
            {iteration, total, best_hit_rate}

        Returns
        -------
        dict with type, best_params, best_performance, all_results, improvement.
        """
        if method not in SEARCH_METHODS:
            raise ValueError(f"Unknown search method: {method}")
        if method == "grid" and self.kind == "hybrid":
            raise ValueError("Grid search is only available for weights and offsets")
        if iterations < 1:
            raise ValueError("iterations must be at least 1")
        if not self._lock.acquire(blocking=False):
            raise ConcurrentEvaluationError("Optimization already in progress")
        try:
            return self._optimize(draws, method, iterations, folds, seed, progress_callback)
        finally:
            self._lock.release()

    def _optimize(self, draws, method, iterations, folds, seed, progress_callback):
        clean, _ = validate_draws(draws)
        splits = create_cv_splits(clean, folds)
        if not splits:
            raise InsufficientDataError(len(clean), folds + 1)

        logger.info("Starting %s optimization with %s search over %d folds",
                    self.kind, method, len(splits))
        rng = np.random.default_rng(seed)
        lattice = weight_lattice() if self.kind == "weights" else None

        self.results = []
        best = None
        for i in range(iterations):
            params = self._sample(method, i, rng, lattice)
            performance = self.evaluate_params(params, splits)
            entry = {"params": params, "performance": performance, "iteration": i + 1}
            self.results.append(entry)

            if best is None or ((performance["hit_rate"], performance["average_matches"])
                                > (best["performance"]["hit_rate"],
                                   best["performance"]["average_matches"])):
                best = entry

            if i % 10 == 0:
                logger.info("%s optimization progress: %d/%d", self.kind, i + 1, iterations)
            if progress_callback is not None:
                progress_callback({
                    "iteration": i + 1,
                    "total": iterations,
                    "best_hit_rate": best["performance"]["hit_rate"],
                })

        self.best_params = best["params"]
        return {
            "type": self.kind,
            "method": method,
            "folds": len(splits),
            "best_params": best["params"],
            "best_performance": best["performance"],
            "all_results": list(self.results),
            "improvement": calculate_improvement(best["performance"], self.results),
        }


def hit_rate_interval(results, confidence_level=0.95):
    """Normal interval for the mean hit rate of all scored candidates."""
    hit_rates = np.array([r["performance"]["hit_rate"] for r in results], dtype=float)
    mean = float(hit_rates.mean())
    std = float(hit_rates.std())
    margin = z_score(confidence_level) * std / np.sqrt(len(hit_rates))
    return {"lower": mean - margin, "upper": mean + margin, "mean": mean, "std": std}


def calculate_improvement(best_performance, results):
    """Percentage improvement of the best candidate over the fixed baseline."""
    return {
        "hit_rate_improvement": 100.0 * (best_performance["hit_rate"] - BASELINE_HIT_RATE)
        / BASELINE_HIT_RATE,
        "average_match_improvement": 100.0 * (best_performance["average_matches"]
                                              - BASELINE_AVERAGE_MATCHES)
        / BASELINE_AVERAGE_MATCHES,
        "confidence_interval": hit_rate_interval(results),
    }


def quick_optimize(draws, kind="hybrid", iterations=50, seed=DEFAULT_SEED):
    """Random search with three folds."""
    return ParameterOptimizer(kind).optimize(draws, method="random", iterations=iterations,
                                             folds=3, seed=seed)
