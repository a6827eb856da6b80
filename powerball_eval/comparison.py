"""
Strategy Comparison & Reporting

Ranks strategies by overall score and compares every pair of them.

The pairwise `significant` flag is a fixed rule, not a statistical test:
two strategies differ when their average match counts are more than
`threshold` (0.5) matches apart. A Welch t-test on the per-prediction
match counts is reported alongside for information only.
"""

import warnings
from datetime import datetime
from itertools import combinations

import numpy as np
import pandas as pd
from scipy import stats

from powerball_eval.config import SIGNIFICANCE_THRESHOLD


def _match_counts(result):
    return np.array(
        [p["metrics"]["white_ball_matches"] for p in result.get("predictions") or []],
        dtype=float,
    )


def welch_t_test(a, b):
    """
    Welch's two-sample t-test. Returns (t_statistic, p_value), with None
    for either value when the test is undefined (too few samples, zero
    variance in both groups).
    """
    if len(a) < 2 or len(b) < 2:
        return None, None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        t_stat, p_value = stats.ttest_ind(a, b, equal_var=False)
    t_stat = float(t_stat) if np.isfinite(t_stat) else None
    p_value = float(p_value) if np.isfinite(p_value) else None
    return t_stat, p_value


def pairwise_significance(results_by_strategy, threshold=SIGNIFICANCE_THRESHOLD):
    """Every unordered pair of strategies, in insertion order."""
    pairs = []
    for (name_a, res_a), (name_b, res_b) in combinations(results_by_strategy.items(), 2):
        mean_a = res_a["average_matches"]
        mean_b = res_b["average_matches"]
        difference = mean_a - mean_b
        t_stat, p_value = welch_t_test(_match_counts(res_a), _match_counts(res_b))
        pairs.append({
            "strategy_a": name_a,
            "strategy_b": name_b,
            "mean_a": mean_a,
            "mean_b": mean_b,
            "difference": difference,
            "significant": abs(difference) > threshold,
            "t_statistic": t_stat,
            "p_value": p_value,
        })
    return pairs


def compare(results_by_strategy, threshold=SIGNIFICANCE_THRESHOLD):
    """
    Rank strategies and compute pairwise significance.

    Parameters
    ----------
    results_by_strategy : {name: AggregatedResult}, in insertion order
    threshold : average-match difference above which a pair is flagged

    Returns
    -------
    dict with ranking (list, best first), best_strategy (name or None)
    and significance (list of pair dicts).
    """
    # sorted() is stable, so equal scores keep insertion order
    ordered = sorted(results_by_strategy.items(), key=lambda item: -item[1]["overall_score"])
    ranking = [
        {
            "rank": rank,
            "strategy": name,
            "overall_score": res["overall_score"],
            "average_matches": res["average_matches"],
            "hit_rate": res["hit_rate"],
            "win_rate": res["win_rate"],
            "total_predictions": res["total_predictions"],
        }
        for rank, (name, res) in enumerate(ordered, start=1)
    ]
    return {
        "ranking": ranking,
        "best_strategy": ranking[0]["strategy"] if ranking else None,
        "significance": pairwise_significance(results_by_strategy, threshold),
    }


def generate_key_findings(per_strategy, ensemble, comparison, total_predictions):
    """Human-readable one-line findings about a run."""
    if total_predictions == 0 or comparison["best_strategy"] is None:
        return ["No results: no predictions were evaluated."]

    best_name = comparison["best_strategy"]
    best = per_strategy[best_name]
    findings = [
        f"Best performing strategy: {best_name} "
        f"(score: {best['overall_score'] * 100:.1f}%)",
        f"Best hit rate (3+ matches): {best['hit_rate'] * 100:.2f}%",
        f"Average matches per prediction: {best['average_matches']:.3f} / 5",
    ]

    if ensemble is not None and ensemble["total_predictions"] > 0:
        delta = ensemble["overall_score"] - best["overall_score"]
        direction = "above" if delta >= 0 else "below"
        findings.append(
            f"Ensemble score: {ensemble['overall_score'] * 100:.1f}% "
            f"({abs(delta) * 100:.1f} points {direction} the best single strategy)"
        )

    flagged = [p for p in comparison["significance"] if p["significant"]]
    if flagged:
        findings.append(
            f"{len(flagged)} strategy pair(s) differ by more than the match threshold"
        )
    else:
        findings.append("No strategy pair differs by more than the match threshold")

    failed = sum(res.get("failed_predictions", 0) for res in per_strategy.values())
    if failed:
        findings.append(f"{failed} prediction point(s) skipped after strategy errors")

    findings.append(f"Total predictions evaluated: {total_predictions}")
    return findings


def build_summary(per_strategy, ensemble, comparison, weights, window_count):
    """Summary block for an EvaluationResult."""
    total_predictions = sum(res["total_predictions"] for res in per_strategy.values())
    best_name = comparison["best_strategy"]
    best = per_strategy.get(best_name) if best_name is not None else None
    has_results = total_predictions > 0 and best is not None

    ensemble_summary = None
    if ensemble is not None:
        ensemble_summary = {
            "overall_score": ensemble["overall_score"],
            "average_matches": ensemble["average_matches"],
            "hit_rate": ensemble["hit_rate"],
            "total_predictions": ensemble["total_predictions"],
        }

    return {
        "best_strategy": best_name if has_results else None,
        "best_score": best["overall_score"] if has_results else None,
        "best_hit_rate": best["hit_rate"] if has_results else None,
        "ranking": comparison["ranking"],
        "ensemble": ensemble_summary,
        "weights": dict(weights),
        "total_predictions": total_predictions,
        "validation_windows": window_count,
        "key_findings": generate_key_findings(per_strategy, ensemble, comparison,
                                              total_predictions),
    }


def print_summary(result):
    """Print an EvaluationResult as a console report."""
    summary = result["summary"]

    print(f"\n{'='*60}")
    print("WALK-FORWARD EVALUATION SUMMARY")
    print(f"{'='*60}")
    data = result.get("data") or {}
    print(f"Draws used: {data.get('valid', 'N/A')} "
          f"(excluded: {data.get('excluded', 0)})")
    print(f"Validation windows: {summary['validation_windows']}")
    print(f"Total predictions: {summary['total_predictions']}")
    if result.get("cancelled"):
        print("Status: CANCELLED (partial results)")

    if summary["total_predictions"] == 0:
        print("\nNo results: no predictions were evaluated.")
        print(f"\n{'='*60}")
        return

    print("\nRANKING:")
    for row in summary["ranking"]:
        print(f"  {row['rank']}. {row['strategy']}: score {row['overall_score']:.4f}, "
              f"avg {row['average_matches']:.3f} matches, "
              f"hit rate {row['hit_rate'] * 100:.2f}% "
              f"({row['total_predictions']} predictions)")

    for name, res in result["per_strategy"].items():
        print(f"\n{name.upper()}:")
        print(f"  Average matches: {res['average_matches']:.3f} / 5")
        print(f"  Best single draw: {res['max_matches']} matches")
        print(f"  Prizes won: {round(res['win_rate'] * res['total_predictions'])} "
              f"/ {res['total_predictions']} draws")
        print(f"  Consistency: {res['consistency']:.3f}")
        mae = res["mean_absolute_error"]
        print(f"  Mean position error: {mae:.2f}" if mae is not None
              else "  Mean position error: N/A")
        if res["calibration_error"] is not None:
            print(f"  Calibration error: {res['calibration_error']:.3f}")
        if res.get("failed_predictions"):
            print(f"  Failed predictions: {res['failed_predictions']}")

    ensemble = summary["ensemble"]
    if ensemble is not None:
        print("\nENSEMBLE:")
        print(f"  Score: {ensemble['overall_score']:.4f}")
        print(f"  Average matches: {ensemble['average_matches']:.3f} / 5")
        print(f"  Hit rate: {ensemble['hit_rate'] * 100:.2f}%")

    if summary["weights"]:
        print("\nMETHOD WEIGHTS:")
        for name, weight in summary["weights"].items():
            print(f"  {name}: {weight:.3f}")

    pairs = result.get("significance") or []
    if pairs:
        print("\nPAIRWISE COMPARISON (|mean difference| > threshold):")
        for pair in pairs:
            marker = "✓" if pair["significant"] else "✗"
            p_value = pair["p_value"]
            p_text = f"{p_value:.4f}" if p_value is not None else "N/A"
            print(f"  {marker} {pair['strategy_a']} vs {pair['strategy_b']}: "
                  f"diff {pair['difference']:+.3f}, Welch p={p_text}")

    print("\nKEY FINDINGS:")
    for finding in summary["key_findings"]:
        print(f"  - {finding}")
    print(f"\n{'='*60}")


def _jsonable(value):
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, pd.Timestamp)):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    return value


def _strip_log(result):
    if result is None:
        return None
    return {k: v for k, v in result.items() if k != "predictions"}


def export_results(result):
    """
    JSON-friendly copy of an EvaluationResult: prediction logs removed,
    timestamps as ISO strings, numpy scalars as Python numbers.
    """
    exported = {k: v for k, v in result.items()
                if k not in ("per_strategy", "ensemble")}
    exported["per_strategy"] = {name: _strip_log(res)
                                for name, res in result["per_strategy"].items()}
    exported["ensemble"] = _strip_log(result.get("ensemble"))
    return _jsonable(exported)
