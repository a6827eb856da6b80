"""
Walk-forward validation windows

Training always precedes testing by array position, which is taken to be
chronological order. The last partial window is dropped rather than
truncated so every window has the same test size.
"""
import math


def count_windows(n_draws, min_training_size, test_window_size, step_size, max_validation_periods):
    """Number of windows generate_windows will emit for these settings."""
    span = min_training_size + test_window_size
    if n_draws < span:
        return 0
    return min(max_validation_periods, (n_draws - span) // step_size + 1)


def generate_windows(draws, min_training_size, test_window_size, step_size, max_validation_periods):
    """
    Lazily yield ValidationWindow dicts over a draw frame.

    Each window holds training_data = draws[start : start+T] and
    test_data = draws[start+T : start+T+W]; start advances by step_size.
    Calling the function again restarts the sequence with identical windows.
    """
    n_draws = len(draws)
    current_start = 0
    period = 0
    while (current_start + min_training_size + test_window_size <= n_draws
           and period < max_validation_periods):
        training_end = current_start + min_training_size
        test_end = training_end + test_window_size
        yield {
            "period": period,
            "training_start": current_start,
            "training_end": training_end,
            "test_start": training_end,
            "test_end": test_end,
            "training_data": draws.iloc[current_start:training_end],
            "test_data": draws.iloc[training_end:test_end],
        }
        current_start += step_size
        period += 1


def create_cv_splits(draws, folds=5, min_training_fraction=0.3):
    """
    Expanding time-series cross-validation splits.

    Fold i trains on draws[0 : m + i*s] and tests on the next s draws, where
    m is the minimum training size (a fraction of the history) and s the
    fold step. Splits are returned in the ValidationWindow shape so they can
    be replayed by the evaluator.
    """
    n_draws = len(draws)
    min_training = int(math.floor(n_draws * min_training_fraction))
    step = (n_draws - min_training) // folds if folds > 0 else 0
    splits = []
    if step <= 0 or min_training <= 0:
        return splits

    for i in range(folds):
        train_end = min_training + i * step
        test_end = min(train_end + step, n_draws)
        if test_end <= train_end:
            continue
        splits.append({
            "period": i,
            "training_start": 0,
            "training_end": train_end,
            "test_start": train_end,
            "test_end": test_end,
            "training_data": draws.iloc[:train_end],
            "test_data": draws.iloc[train_end:test_end],
        })
    return splits
