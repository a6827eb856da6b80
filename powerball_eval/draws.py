"""
Draw history handling for the Powerball evaluation engine

Draws are held in a pandas DataFrame with columns date, wb1-wb5 and
powerball, one row per draw in chronological order. Rows that fail
structural validation are excluded before any validation window is built;
the exclusions are logged and reported, never dropped silently.
"""
import logging
from collections.abc import Mapping

import numpy as np
import pandas as pd

from powerball_eval.config import (
    WHITE_BALL_MIN, WHITE_BALL_MAX, POWERBALL_MIN, POWERBALL_MAX, WHITE_BALLS_PER_DRAW,
)
from powerball_eval.errors import InvalidDrawError

logger = logging.getLogger(__name__)

WHITE_COLS = [f"wb{i}" for i in range(1, WHITE_BALLS_PER_DRAW + 1)]
POWERBALL_COL = "powerball"
DRAW_COLUMNS = ["date"] + WHITE_COLS + [POWERBALL_COL]


def _record_to_row(record):
    """Flatten one {date, white_balls, powerball} mapping into a frame row."""
    white_balls = record.get("white_balls")
    if white_balls is None:
        white_balls = []
    white_balls = list(white_balls)
    row = {"date": record.get("date"), POWERBALL_COL: record.get("powerball")}
    for i, col in enumerate(WHITE_COLS):
        row[col] = white_balls[i] if i < len(white_balls) else None
    # Keep the true ball count so check_draw can reject over-long records
    row["_ball_count"] = len(white_balls)
    return row


def draws_to_frame(draws):
    """
    Build a draw DataFrame from a frame or a sequence of mappings.

    Parameters
    ----------
    draws : pd.DataFrame or iterable of mappings
        Either a frame that already has the wb1-wb5 and powerball columns,
        or records shaped like {"date": ..., "white_balls": [...], "powerball": n}.

    Returns
    -------
    pd.DataFrame with DRAW_COLUMNS (plus _ball_count for record input).
    The caller's object is never modified.
    """
    if isinstance(draws, pd.DataFrame):
        missing = [c for c in WHITE_COLS + [POWERBALL_COL] if c not in draws.columns]
        if missing:
            raise ValueError(f"Draw frame is missing columns: {', '.join(missing)}")
        df = draws.copy()
        if "date" not in df.columns:
            df["date"] = pd.NaT
        return df

    rows = []
    for record in draws:
        if not isinstance(record, Mapping):
            raise TypeError(f"Draw records must be mappings, got {type(record).__name__}")
        rows.append(_record_to_row(record))
    if not rows:
        return pd.DataFrame(columns=DRAW_COLUMNS)
    return pd.DataFrame(rows)


def _as_int(value, label):
    if value is None or (isinstance(value, float) and np.isnan(value)):
        raise InvalidDrawError(f"missing {label}")
    if isinstance(value, bool):
        raise InvalidDrawError(f"{label} is not an integer: {value!r}")
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise InvalidDrawError(f"{label} is not an integer: {value!r}")
    if not as_float.is_integer():
        raise InvalidDrawError(f"{label} is not an integer: {value!r}")
    return int(as_float)


def check_draw(white_balls, powerball, ball_count=None):
    """
    Validate one draw and return it as (sorted white balls, powerball).

    Raises InvalidDrawError on a wrong ball count, duplicate or out-of-range
    white balls, or a missing/out-of-range powerball.
    """
    if ball_count is not None and ball_count != WHITE_BALLS_PER_DRAW:
        raise InvalidDrawError(f"expected {WHITE_BALLS_PER_DRAW} white balls, got {ball_count}")

    balls = [_as_int(b, "white ball") for b in white_balls]
    if len(balls) != WHITE_BALLS_PER_DRAW:
        raise InvalidDrawError(f"expected {WHITE_BALLS_PER_DRAW} white balls, got {len(balls)}")
    if len(set(balls)) != WHITE_BALLS_PER_DRAW:
        raise InvalidDrawError(f"duplicate white balls {balls}")
    out_of_range = [b for b in balls if not WHITE_BALL_MIN <= b <= WHITE_BALL_MAX]
    if out_of_range:
        raise InvalidDrawError(f"white balls out of range {out_of_range}")

    pb = _as_int(powerball, "powerball")
    if not POWERBALL_MIN <= pb <= POWERBALL_MAX:
        raise InvalidDrawError(f"powerball out of range {pb}")
    return sorted(balls), pb


def validate_draws(draws):
    """
    Apply the exclusion policy: keep structurally valid draws, drop the rest.

    Returns
    -------
    (clean_df, report)
        clean_df : DataFrame with DRAW_COLUMNS, integer balls, index 0..n-1
                   in the original order
        report   : dict with total, valid, excluded, reasons
    """
    df = draws_to_frame(draws)
    total = len(df)
    has_count = "_ball_count" in df.columns

    keep_rows = []
    reasons = []
    for pos, (idx, row) in enumerate(df.iterrows()):
        count = int(row["_ball_count"]) if has_count else None
        try:
            balls, pb = check_draw([row[c] for c in WHITE_COLS], row[POWERBALL_COL], count)
        except InvalidDrawError as e:
            e.index = pos
            logger.warning("Excluding draw at row %d: %s", pos, e.reason)
            reasons.append({"index": pos, "reason": e.reason})
            continue
        keep_rows.append({"date": row["date"], **dict(zip(WHITE_COLS, balls)), POWERBALL_COL: pb})

    clean = pd.DataFrame(keep_rows, columns=DRAW_COLUMNS)
    clean["date"] = pd.to_datetime(clean["date"], errors="coerce")
    for col in WHITE_COLS + [POWERBALL_COL]:
        clean[col] = clean[col].astype(int)
    clean = clean.reset_index(drop=True)

    if reasons:
        logger.info("Excluded %d of %d draws that failed validation", len(reasons), total)

    report = {
        "total": total,
        "valid": len(clean),
        "excluded": len(reasons),
        "reasons": reasons,
    }
    return clean, report


def white_ball_matrix(df):
    """Return an (n, 5) int array of white balls, each row sorted ascending."""
    if len(df) == 0:
        return np.zeros((0, WHITE_BALLS_PER_DRAW), dtype=int)
    return np.sort(df[WHITE_COLS].to_numpy(dtype=int), axis=1)


def powerball_array(df):
    """Return the powerball column as an int array."""
    return df[POWERBALL_COL].to_numpy(dtype=int)


def row_to_draw(row):
    """Turn one frame row into a plain {date, white_balls, powerball} dict."""
    date = row["date"]
    return {
        "date": None if pd.isna(date) else date,
        "white_balls": sorted(int(row[c]) for c in WHITE_COLS),
        "powerball": int(row[POWERBALL_COL]),
    }


def load_draws(path):
    """
    Load a draw CSV with columns date, wb1-wb5, powerball.

    Extra columns are ignored. The file is read as-is; call validate_draws
    (or run_evaluation, which does it for you) before evaluating.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in WHITE_COLS + [POWERBALL_COL] if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")
    if "date" not in df.columns:
        df["date"] = pd.NaT
    return df[DRAW_COLUMNS]


def synthetic_draws(n_draws, start_date="2020-01-01"):
    """
    Deterministic synthetic history used by the CLI demo and the tests.

    Draw i has white balls (i + 10k) % 69 + 1 for k in 0..4 and
    powerball (i % 26) + 1.
    """
    dates = pd.date_range(start_date, periods=n_draws, freq="3D")
    rows = []
    for i in range(n_draws):
        balls = [(i + 10 * k) % WHITE_BALL_MAX + 1 for k in range(WHITE_BALLS_PER_DRAW)]
        rows.append({
            "date": dates[i],
            **dict(zip(WHITE_COLS, balls)),
            POWERBALL_COL: (i % POWERBALL_MAX) + 1,
        })
    return pd.DataFrame(rows, columns=DRAW_COLUMNS)
