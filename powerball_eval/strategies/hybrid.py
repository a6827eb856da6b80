"""
Hybrid Strategy

Three highest-energy numbers plus the most frequent numbers not already
chosen, five in total.
"""

from powerball_eval.strategies import energy, frequency
from powerball_eval.strategies.base import make_prediction

ENERGY_PICKS = 3


def predict(df, options=None):
    options = options or {}
    energy_pred = energy.predict(df, options)
    freq_pred = frequency.predict(df, options)

    chosen = list(energy_pred["white_balls"][:ENERGY_PICKS])
    for n in freq_pred["white_balls"]:
        if len(chosen) == 5:
            break
        if n not in chosen:
            chosen.append(n)
    # Frequency top five can overlap the energy picks; backfill from energy
    for n in energy_pred["white_balls"][ENERGY_PICKS:]:
        if len(chosen) == 5:
            break
        if n not in chosen:
            chosen.append(n)

    return make_prediction(chosen, energy_pred["powerball"], 0.72, "hybrid")
