"""
Powerball Draw History - Descriptive Statistics

Frequency, hot/cold, overdue, pair and gap analyses over a draw frame.
These describe the history only; the evaluation engine never uses them to
score strategies.

Data schema expected:
    date, wb1-wb5, powerball

White balls range 1-69, the powerball 1-26.
"""

from collections import Counter
from itertools import combinations

import numpy as np
import pandas as pd

from powerball_eval.config import POWERBALL_MAX, POWERBALL_MIN, WHITE_BALL_MAX, WHITE_BALL_MIN
from powerball_eval.draws import POWERBALL_COL, WHITE_COLS, white_ball_matrix


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ALL_WHITE_BALLS = list(range(WHITE_BALL_MIN, WHITE_BALL_MAX + 1))
ALL_POWERBALLS = list(range(POWERBALL_MIN, POWERBALL_MAX + 1))


def _white_balls_flat(df: pd.DataFrame) -> np.ndarray:
    """Every white ball drawn, one entry per ball."""
    return df[WHITE_COLS].to_numpy(dtype=int).flatten()


def _white_ball_counter(df: pd.DataFrame) -> Counter:
    return Counter(int(n) for n in _white_balls_flat(df))


# ===================================================================
# 1. Frequency Analysis
# ===================================================================

def frequency_analysis(df: pd.DataFrame) -> dict:
    """
    Count each white ball 1-69 and each powerball 1-26 across all draws.

    Returns
    -------
    dict with keys:
        white_ball_counts : dict {number: count}
        powerball_counts  : dict {number: count}
        white_ball_pct    : dict {number: pct of white-ball slots}
        ranked            : list of (number, count) sorted desc, ties by number
        total_draws       : int
        dataframe         : pd.DataFrame summary
    """
    total_draws = len(df)
    white_counter = _white_ball_counter(df)
    white_counts = {n: white_counter.get(n, 0) for n in ALL_WHITE_BALLS}

    pb_counter = Counter(int(n) for n in df[POWERBALL_COL].dropna())
    powerball_counts = {n: pb_counter.get(n, 0) for n in ALL_POWERBALLS}

    total_slots = len(WHITE_COLS) * total_draws if total_draws > 0 else 1
    white_pct = {n: round(100.0 * white_counts[n] / total_slots, 4) for n in ALL_WHITE_BALLS}

    ranked = sorted(white_counts.items(), key=lambda x: (-x[1], x[0]))

    summary_df = pd.DataFrame([
        {"number": num, "count": cnt, "pct": white_pct[num], "rank": rank}
        for rank, (num, cnt) in enumerate(ranked, 1)
    ])

    return {
        "white_ball_counts": white_counts,
        "powerball_counts": powerball_counts,
        "white_ball_pct": white_pct,
        "ranked": ranked,
        "total_draws": total_draws,
        "dataframe": summary_df,
    }


# ===================================================================
# 2. Hot / Cold / Overdue Numbers
# ===================================================================

def hot_cold_numbers(df: pd.DataFrame, recent_count: int = None, top_n: int = 5) -> dict:
    """
    Hot  : the top_n most frequent white balls (numbers never drawn excluded).
    Cold : the top_n least frequent, never-drawn numbers first, ties by number.

    recent_count limits the analysis to the latest draws.
    """
    use_df = df.iloc[-recent_count:] if recent_count else df
    counter = _white_ball_counter(use_df)
    counts = [(n, counter.get(n, 0)) for n in ALL_WHITE_BALLS]

    hot = [n for n, c in sorted(counts, key=lambda x: (-x[1], x[0])) if c > 0][:top_n]
    cold = [n for n, _ in sorted(counts, key=lambda x: (x[1], x[0]))][:top_n]

    return {
        "hot": hot,
        "cold": cold,
        "draws_considered": len(use_df),
    }


def overdue_numbers(df: pd.DataFrame, top_n: int = None) -> list:
    """
    White balls ordered from most to least overdue.

    Returns a list of (number, draws_since_seen). Numbers never drawn come
    first with draws_since_seen = None; the rest follow by longest absence.
    """
    matrix = white_ball_matrix(df)
    n_draws = len(matrix)
    last_seen = {}
    for i in range(n_draws - 1, -1, -1):
        for n in matrix[i]:
            last_seen.setdefault(int(n), i)

    never = [(n, None) for n in ALL_WHITE_BALLS if n not in last_seen]
    seen = sorted(
        ((n, n_draws - 1 - idx) for n, idx in last_seen.items()),
        key=lambda x: (-x[1], x[0]),
    )
    ordered = never + seen
    return ordered[:top_n] if top_n else ordered


# ===================================================================
# 3. Pairs and Gaps
# ===================================================================

def pair_analysis(df: pd.DataFrame, top_n: int = 20) -> dict:
    """
    Count every sorted white-ball pair that appeared in the same draw.

    Returns
    -------
    dict with keys:
        top_pairs   : list of ((a, b), count), most common first
        total_pairs : number of distinct pairs seen
    """
    pair_counter: Counter = Counter()
    for row in white_ball_matrix(df):
        for pair in combinations(row.tolist(), 2):
            pair_counter[pair] += 1

    top_pairs = sorted(pair_counter.items(), key=lambda x: (-x[1], x[0]))[:top_n]
    return {
        "top_pairs": top_pairs,
        "total_pairs": len(pair_counter),
    }


def gap_analysis(df: pd.DataFrame) -> dict:
    """
    Gaps between consecutive sorted white balls within each draw.

    Returns
    -------
    dict with keys:
        gap_counts : dict {gap: count}, ascending by gap
        mean_gap   : float
        most_common_gap : int or None
    """
    matrix = white_ball_matrix(df)
    if len(matrix) == 0:
        return {"gap_counts": {}, "mean_gap": 0.0, "most_common_gap": None}

    gaps = np.diff(matrix, axis=1).flatten()
    gap_counter = Counter(int(g) for g in gaps)
    most_common = sorted(gap_counter.items(), key=lambda x: (-x[1], x[0]))[0][0]

    return {
        "gap_counts": dict(sorted(gap_counter.items())),
        "mean_gap": float(gaps.mean()),
        "most_common_gap": most_common,
    }


# ===================================================================
# Full analysis
# ===================================================================

def get_full_analysis(df: pd.DataFrame) -> dict:
    """Run every analysis and return the results keyed by name."""
    return {
        "frequency": frequency_analysis(df),
        "hot_cold": hot_cold_numbers(df),
        "overdue": overdue_numbers(df, top_n=10),
        "pairs": pair_analysis(df),
        "gaps": gap_analysis(df),
    }
