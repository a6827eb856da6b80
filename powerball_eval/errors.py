"""Exception taxonomy for the evaluation engine."""


class EvaluationError(Exception):
    """Base class for every error raised by powerball_eval."""


class InsufficientDataError(EvaluationError):
    """History is too short for the requested window configuration."""

    def __init__(self, available, required):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient data. Need at least {required} valid draws, got {available}"
        )


class InvalidDrawError(EvaluationError):
    """A draw record failed structural validation."""

    def __init__(self, reason, index=None):
        self.reason = reason
        self.index = index
        where = f" (row {index})" if index is not None else ""
        super().__init__(f"Invalid draw{where}: {reason}")


class StrategyPredictionError(EvaluationError):
    """A single strategy call failed. Recovered locally by the evaluator."""

    def __init__(self, strategy, period, draw_index, cause):
        self.strategy = strategy
        self.period = period
        self.draw_index = draw_index
        self.cause = cause
        super().__init__(
            f"Prediction failed for {strategy} in window {period} at draw {draw_index}: {cause}"
        )


class EvaluationCancelled(EvaluationError):
    """Cooperative cancellation was requested. Carries the partial predictions."""

    def __init__(self, partial=None):
        self.partial = list(partial or [])
        super().__init__("Evaluation cancelled")


class ConcurrentEvaluationError(EvaluationError):
    """An evaluation is already running on this evaluator instance."""
