#!/usr/bin/env python3
"""
Standalone evaluation script.
Walk-forward backtest of the prediction strategies on a draw CSV, or on the
deterministic synthetic history when no CSV is given.
"""
import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from powerball_eval.backtester import run_evaluation, save_results
from powerball_eval.comparison import export_results
from powerball_eval.draws import load_draws, synthetic_draws
from powerball_eval.errors import InsufficientDataError
from powerball_eval.strategies import ALL_STRATEGIES, BUILTIN_STRATEGIES


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Walk-forward evaluation of Powerball strategies")
    parser.add_argument("--csv", help="draw history CSV (date, wb1-wb5, powerball)")
    parser.add_argument("--synthetic", type=int, default=300,
                        help="number of synthetic draws when no CSV is given")
    parser.add_argument("--strategies", nargs="+", choices=sorted(ALL_STRATEGIES),
                        help="strategies to evaluate (default: built-in set)")
    parser.add_argument("--min-training", type=int, default=100)
    parser.add_argument("--test-window", type=int, default=50)
    parser.add_argument("--step", type=int, default=10)
    parser.add_argument("--max-periods", type=int, default=20)
    parser.add_argument("--confidence", type=float, default=0.95)
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--no-ensemble", action="store_true")
    parser.add_argument("--no-adaptive", action="store_true")
    parser.add_argument("--output", help="write the prediction log to this CSV")
    parser.add_argument("--json", help="write the exported result to this JSON file")
    parser.add_argument("--quiet", action="store_true", help="no progress output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.csv:
        print(f"Loading data from {args.csv}...")
        draws = load_draws(args.csv)
    else:
        print(f"Generating {args.synthetic} synthetic draws...")
        draws = synthetic_draws(args.synthetic)
    print(f"Loaded {len(draws)} draws")

    if args.strategies:
        strategies = {name: ALL_STRATEGIES[name] for name in args.strategies}
    else:
        strategies = dict(BUILTIN_STRATEGIES)

    config = {
        "min_training_size": args.min_training,
        "test_window_size": args.test_window,
        "step_size": args.step,
        "max_validation_periods": args.max_periods,
        "confidence_level": args.confidence,
        "max_workers": args.workers,
        "include_ensemble": not args.no_ensemble,
        "adaptive_weighting": not args.no_adaptive,
    }

    def show_progress(progress):
        if not args.quiet:
            print(f"  [{progress['progress_percent']:5.1f}%] {progress['current_strategy']} "
                  f"window {progress['current_window'] + 1}/{progress['total_windows']}")

    try:
        result = run_evaluation(draws, strategies, config, progress_callback=show_progress,
                                verbose=True)
    except InsufficientDataError as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        path = save_results(result, args.output)
        if path:
            print(f"\nPrediction log saved to {path}")
    if args.json:
        with open(args.json, "w") as f:
            json.dump(export_results(result), f, indent=2)
        print(f"Results saved to {args.json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
