"""
Powerball Prediction Strategies

Available strategies:
- confidence_interval: Per-position means with bootstrap/normal/time-weighted intervals
- energy: Energy-signature scoring of number-shape features
- frequency: Most frequent white balls over a recent lookback
- temporal_average: Rounded per-position mean of the latest draws
- hybrid: Energy picks topped up with frequency picks
- offsets: Frequency-weighted base value shifted by fixed offsets

Every strategy is a pure predict(df, options) -> dict function.
"""

from . import confidence_interval
from . import energy
from . import frequency
from . import temporal_average
from . import hybrid
from . import offsets

# Default set evaluated by run_evaluation when the caller passes none
BUILTIN_STRATEGIES = {
    "confidence": confidence_interval.predict,
    "energy": energy.predict,
    "frequency": frequency.predict,
    "temporal": temporal_average.predict,
}

ALL_STRATEGIES = {
    **BUILTIN_STRATEGIES,
    "hybrid": hybrid.predict,
    "offsets": offsets.predict,
}


def get_strategy(name):
    """Look up a built-in strategy's predict function by name."""
    try:
        return ALL_STRATEGIES[name]
    except KeyError:
        raise KeyError(
            f"Unknown strategy {name!r}. Available: {', '.join(sorted(ALL_STRATEGIES))}"
        ) from None


__all__ = [
    "confidence_interval",
    "energy",
    "frequency",
    "temporal_average",
    "hybrid",
    "offsets",
    "BUILTIN_STRATEGIES",
    "ALL_STRATEGIES",
    "get_strategy",
]
