"""Command-line entry point for batch IBL gamble simulations."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Sequence

from ibl_choice.core.config import (
    GAMBLE_WEIGHTINGS,
    default_simulation_config,
    load_simulation_config,
)
from ibl_choice.io.tabular import write_summary_json, write_trial_records_csv
from ibl_choice.runtime.engine import run_simulation

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def run_simulation_cli(argv: Sequence[str] | None = None) -> int:
    """Run a batch simulation and write its records to CSV.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        CLI argument list. When ``None``, process arguments are used.

    Returns
    -------
    int
        Exit code (`0` on success).
    """

    parser = argparse.ArgumentParser(
        description="Simulate repeated binary-gamble choices with an instance-based learning model."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a JSON or YAML simulation config. Defaults to the stock A/B problem.",
    )
    parser.add_argument("--output", default="ibl_records.csv", help="Destination CSV path.")
    parser.add_argument("--summary", default=None, help="Optional JSON summary path.")
    parser.add_argument("--seed", type=int, default=None, help="Master seed; overrides the config seed.")
    parser.add_argument("--n-subjects", type=int, default=None, help="Override the number of subjects.")
    parser.add_argument("--n-trials", type=int, default=None, help="Override the number of trials.")
    parser.add_argument(
        "--gamble-weighting",
        choices=GAMBLE_WEIGHTINGS,
        default=None,
        help="Rule for sampling which gamble is played.",
    )
    parser.add_argument("--n-jobs", type=int, default=1, help="Worker processes; -1 uses every CPU.")
    parser.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Keep running when a subject fails and report it in the summary.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    config = load_simulation_config(args.config) if args.config is not None else default_simulation_config()
    overrides = {
        key: value
        for key, value in (
            ("seed", args.seed),
            ("n_subjects", args.n_subjects),
            ("n_trials", args.n_trials),
            ("gamble_weighting", args.gamble_weighting),
        )
        if value is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)

    result = run_simulation(config, n_jobs=args.n_jobs, fail_fast=not args.no_fail_fast)
    csv_path = write_trial_records_csv(result, Path(args.output))
    print(
        "Simulation complete: "
        f"n_subjects={config.n_subjects}, n_trials={config.n_trials}, n_records={len(result)}"
    )
    print(
        f"EV(A)={config.gamble_a.expected_value:g}, EV(B)={config.gamble_b.expected_value:g}"
    )
    print(f"Records CSV: {csv_path}")
    if args.summary is not None:
        summary_path = write_summary_json(result, Path(args.summary))
        print(f"Summary JSON: {summary_path}")
    if result.failures:
        print(f"Failed subjects: {sorted(result.failures)}")
    return 0


def main() -> None:
    """Execute simulation CLI and exit with returned code."""

    raise SystemExit(run_simulation_cli())


if __name__ == "__main__":
    main()


__all__ = ["main", "run_simulation_cli"]
