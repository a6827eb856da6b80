"""
Naive Temporal-Average Strategy

Averages each sorted ball position over the most recent draws and rounds.
Stands in for a sequence model: it only looks at the recent trend of each
position.
"""

import numpy as np

from powerball_eval.draws import white_ball_matrix
from powerball_eval.strategies.base import make_distinct, make_prediction, predict_powerball

RECENT_DRAWS = 10


def predict(df, options=None):
    options = options or {}
    recent = df.iloc[-options.get("recent_draws", RECENT_DRAWS):]
    if len(recent) == 0:
        raise ValueError("Cannot average an empty history")

    means = white_ball_matrix(recent).mean(axis=0)
    predicted = make_distinct(np.rint(means).astype(int))

    return make_prediction(
        predicted,
        predict_powerball(df),
        0.65,
        "temporal-average",
    )
