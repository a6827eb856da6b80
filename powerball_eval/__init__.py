"""
Powerball Walk-Forward Evaluation Engine

Modules:
- draws: draw history loading and validation
- windows: walk-forward validation windows and CV splits
- metrics: per-draw scoring and aggregation
- strategies: pluggable prediction strategies
- evaluator: draw-by-draw replay of strategies over windows
- ensemble: adaptive method weights and weighted-vote ensemble
- comparison: ranking, pairwise comparison and reports
- backtester: run_evaluation entry point
- analysis: descriptive statistics of the draw history
- optimizer: parameter search over CV splits
"""

from .backtester import run_evaluation, save_results
from .comparison import compare, export_results, print_summary
from .config import DEFAULT_CONFIG, resolve_config
from .draws import load_draws, synthetic_draws, validate_draws
from .ensemble import combine_predictions, update_weight
from .errors import (
    ConcurrentEvaluationError,
    EvaluationCancelled,
    EvaluationError,
    InsufficientDataError,
    InvalidDrawError,
    StrategyPredictionError,
)
from .evaluator import StrategyEvaluator, evaluate
from .optimizer import ParameterOptimizer
from .strategies import ALL_STRATEGIES, BUILTIN_STRATEGIES, get_strategy
from .windows import count_windows, generate_windows

__version__ = "1.0.0"

__all__ = [
    "run_evaluation",
    "save_results",
    "compare",
    "export_results",
    "print_summary",
    "DEFAULT_CONFIG",
    "resolve_config",
    "load_draws",
    "synthetic_draws",
    "validate_draws",
    "combine_predictions",
    "update_weight",
    "ConcurrentEvaluationError",
    "EvaluationCancelled",
    "EvaluationError",
    "InsufficientDataError",
    "InvalidDrawError",
    "StrategyPredictionError",
    "StrategyEvaluator",
    "evaluate",
    "ParameterOptimizer",
    "ALL_STRATEGIES",
    "BUILTIN_STRATEGIES",
    "get_strategy",
    "count_windows",
    "generate_windows",
]
