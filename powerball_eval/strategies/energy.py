"""
Energy Signature Strategy

Scores each candidate white ball by a weighted "energy" built from four
number-shape features:
- prime:          1 if the number is prime
- digital_root:   repeated digit sum, scaled to [0, 1]
- mod5:           (n % 5) * 0.2
- grid_position:  position score on a 5 x 14 play-slip grid

The features carry no information about future draws; this strategy is a
baseline heuristic kept for comparison.
"""

import numpy as np

from powerball_eval.draws import white_ball_matrix
from powerball_eval.strategies.base import (
    ALL_WHITE_BALLS, make_prediction, predict_powerball, top_numbers,
)

DEFAULT_ENERGY_WEIGHTS = {
    "prime": 0.3,
    "digital_root": 0.2,
    "mod5": 0.2,
    "grid_position": 0.3,
}

GRID = [
    [0.3, 0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.3, 0.5, 0.7, 0.9, 1.0, 0.9],
    [0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.7],
    [0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.3, 0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5],
    [0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.7],
    [0.3, 0.5, 0.7, 0.9, 1.0, 0.9, 0.7, 0.5, 0.3, 0.5, 0.7, 0.9, 1.0, 0.9],
]


def is_prime(n):
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def digital_root(n):
    return n - 9 * ((n - 1) // 9)


def grid_position_score(n):
    """Score of n on the play-slip grid; 0.5 outside the grid."""
    if n < 1 or n > 70:
        return 0.5
    row, col = divmod(n - 1, 14)
    return GRID[row][col]


def calculate_energy(numbers, weights=None):
    """
    Energy breakdown for each number.

    Returns a list of dicts: number, is_prime, digital_root, mod5, grid_score, energy.
    """
    w = dict(DEFAULT_ENERGY_WEIGHTS)
    if weights:
        w.update(weights)
    out = []
    for n in numbers:
        n = int(n)
        prime = 1.0 if is_prime(n) else 0.0
        root = digital_root(n)
        mod5 = (n % 5) * 0.2
        grid = grid_position_score(n)
        energy = (
            w["prime"] * prime
            + w["digital_root"] * (root / 9.0)
            + w["mod5"] * mod5
            + w["grid_position"] * grid
        )
        out.append({
            "number": n,
            "is_prime": bool(prime),
            "digital_root": root,
            "mod5": mod5,
            "grid_score": grid,
            "energy": energy,
        })
    return out


def predict(df, options=None):
    """
    Top five numbers by energy.

    Options: energy_weights, candidate_pool ("history" = numbers seen in df,
    "all" = 1-69).
    """
    options = options or {}
    if options.get("candidate_pool", "history") == "all":
        candidates = ALL_WHITE_BALLS
    else:
        candidates = sorted(set(np.unique(white_ball_matrix(df)).tolist()))
    if not candidates:
        raise ValueError("No candidate numbers in history")

    energy_data = calculate_energy(candidates, options.get("energy_weights"))
    scores = {item["number"]: item["energy"] for item in energy_data}

    return make_prediction(
        top_numbers(scores),
        predict_powerball(df),
        0.70,
        "energy-signature",
        energy_scores=scores,
    )
