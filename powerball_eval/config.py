"""
Configuration constants for the Powerball walk-forward evaluation engine.

Tunable defaults live here as module constants. The scoring constants
(overall score weights, the MAE normaliser, the significance threshold)
are arbitrary heuristics; they are kept explicit and overridable
rather than treated as statistics.
"""

import copy
import numbers

# ─── Game Rules ──────────────────────────────────────────────────────
WHITE_BALL_MIN = 1
WHITE_BALL_MAX = 69
POWERBALL_MIN = 1
POWERBALL_MAX = 26
WHITE_BALLS_PER_DRAW = 5

# ─── Walk-Forward Windows ────────────────────────────────────────────
MIN_TRAINING_SIZE = 100
TEST_WINDOW_SIZE = 50
STEP_SIZE = 10
MAX_VALIDATION_PERIODS = 20

# ─── Strategy Defaults ───────────────────────────────────────────────
CONFIDENCE_LEVEL = 0.95
BOOTSTRAP_ITERATIONS = 200
DEFAULT_SEED = 42
POWERBALL_LOOKBACK = 20             # Recent draws used for the shared powerball guess

# ─── Scoring ─────────────────────────────────────────────────────────
HIT_THRESHOLD = 3                   # White-ball matches that count as a "hit"
MAE_NORMALIZER = 35.0               # Position error that maps to a zero position term
OVERALL_SCORE_WEIGHTS = {
    "matches": 0.4,                 # average_matches / 5
    "hit_rate": 0.3,
    "win_rate": 0.2,
    "position": 0.1,                # 1 - MAE / MAE_NORMALIZER
}

# ─── Adaptive Weighting ──────────────────────────────────────────────
LEARNING_RATE = 0.1
MIN_METHOD_WEIGHT = 0.05
MAX_METHOD_WEIGHT = 0.7

# ─── Comparison ──────────────────────────────────────────────────────
# Fixed threshold on the difference in average matches. Not a real test.
SIGNIFICANCE_THRESHOLD = 0.5

# ─── Prize Table (Powerball) ─────────────────────────────────────────
PRIZE_TIERS = [
    "jackpot", "match5", "match4plus", "match4", "match3plus",
    "match3", "match2plus", "match1plus", "powerball",
]
PRIZE_VALUES = {
    "jackpot": 100_000_000,
    "match5": 1_000_000,
    "match4plus": 50_000,
    "match4": 100,
    "match3plus": 100,
    "match3": 7,
    "match2plus": 7,
    "match1plus": 4,
    "powerball": 4,
}
TICKET_COST = 2.0
EXPECTED_TIER_ODDS = {
    "jackpot": 1 / 292_201_338,
    "match5": 1 / 11_688_054,
    "match4plus": 1 / 913_129,
    "match4": 1 / 36_525,
    "match3plus": 1 / 14_494,
    "match3": 1 / 580,
    "match2plus": 1 / 701,
    "match1plus": 1 / 92,
    "powerball": 1 / 38.32,
}

ALL_METRICS = ["matches", "consistency", "prize-tiers", "confidence-accuracy", "expected-value"]

DEFAULT_CONFIG = {
    "min_training_size": MIN_TRAINING_SIZE,
    "test_window_size": TEST_WINDOW_SIZE,
    "step_size": STEP_SIZE,
    "max_validation_periods": MAX_VALIDATION_PERIODS,
    "confidence_level": CONFIDENCE_LEVEL,
    "bootstrap_iterations": BOOTSTRAP_ITERATIONS,
    "include_ensemble": True,
    "adaptive_weighting": True,
    "metrics": list(ALL_METRICS),
    "score_weights": dict(OVERALL_SCORE_WEIGHTS),
    "mae_normalizer": MAE_NORMALIZER,
    "learning_rate": LEARNING_RATE,
    "min_weight": MIN_METHOD_WEIGHT,
    "max_weight": MAX_METHOD_WEIGHT,
    "significance_threshold": SIGNIFICANCE_THRESHOLD,
    "initial_weights": None,
    "strategy_options": {},
    "seed": DEFAULT_SEED,
    "max_workers": 1,
}

_POSITIVE_INT_KEYS = (
    "min_training_size", "test_window_size", "step_size",
    "max_validation_periods", "bootstrap_iterations", "max_workers",
)


def resolve_config(config=None, **overrides):
    """
    Merge caller settings over DEFAULT_CONFIG and validate the result.

    Raises ValueError for unknown keys or out-of-range values.
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    supplied = dict(config or {})
    supplied.update(overrides)

    unknown = sorted(set(supplied) - set(DEFAULT_CONFIG))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key, value in supplied.items():
        if key == "score_weights" and value is not None:
            bad = sorted(set(value) - set(OVERALL_SCORE_WEIGHTS))
            if bad:
                raise ValueError(f"Unknown score weight keys: {', '.join(bad)}")
            merged["score_weights"].update(value)
        elif value is not None or key == "initial_weights":
            merged[key] = value

    for key in _POSITIVE_INT_KEYS:
        value = merged[key]
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
            raise ValueError(f"{key} must be a positive integer, got {value!r}")
        merged[key] = int(value)

    if not 0.0 < float(merged["confidence_level"]) < 1.0:
        raise ValueError(f"confidence_level must be in (0, 1), got {merged['confidence_level']!r}")
    if merged["learning_rate"] < 0:
        raise ValueError("learning_rate must be non-negative")
    if not 0.0 <= merged["min_weight"] <= merged["max_weight"] <= 1.0:
        raise ValueError("weight bounds must satisfy 0 <= min_weight <= max_weight <= 1")
    if merged["mae_normalizer"] <= 0:
        raise ValueError("mae_normalizer must be positive")

    unknown_metrics = sorted(set(merged["metrics"]) - set(ALL_METRICS))
    if unknown_metrics:
        raise ValueError(f"Unknown metrics: {', '.join(unknown_metrics)}")

    return merged
