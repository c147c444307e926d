"""
Validate a chat load-test summary against threshold configuration.

After a Locust run completes, CI invokes this script to decide whether
the build passes or fails.  It reads the ``summary.json`` written by the
``quitting`` listener and compares it against the limits defined in
:file:`thresholds.yml`.

Exit codes follow a three-state convention so that CI can distinguish
"thresholds breached" from "script crashed":

- ``0`` — all thresholds passed
- ``1`` — at least one threshold was breached
- ``2`` — the script itself failed (missing file, bad YAML, etc.)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# Allow ``python loadtest/check_thresholds.py`` from the project root.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from loadtest.thresholds import (  # noqa: E402
    ThresholdResult,
    all_passed,
    evaluate_thresholds,
    load_thresholds,
)

# Three-state exit codes so CI can tell "test failed" from "script crashed".
EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2

DEFAULT_THRESHOLDS = Path(__file__).resolve().parent / "thresholds.yml"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the threshold checker."""
    parser = argparse.ArgumentParser(
        description="Check a chat load-test summary against performance thresholds."
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=Path("summary.json"),
        help="Path to the summary.json written at the end of a run",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=DEFAULT_THRESHOLDS,
        help="Path to thresholds YAML file",
    )
    return parser.parse_args(argv)


def _load_summary(path: Path) -> dict[str, Any]:
    """
    Read a run summary from JSON.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, dict):
        raise ValueError(f"Summary file {path} must contain a JSON object")
    return data


def _print_summary(results: list[ThresholdResult], passed: bool) -> None:
    """Print a human-readable results table to stdout for CI logs."""
    print("Chat Load Test Threshold Check")
    print("-" * 66)
    print(f"{'Metric':<26}{'Actual':>12}{'Limit':>14}{'Status':>12}")
    print("-" * 66)
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        print(f"{result.name:<26}{result.actual:>12.3f}{result.limit:>14.3f}{status:>12}")
    print("-" * 66)
    print(f"Overall: {'PASS' if passed else 'FAIL'}")


def main(argv: list[str] | None = None) -> int:
    """
    Entry point: load thresholds and summary, compare, and print results.

    Returns:
        ``EXIT_PASS`` (0) if all thresholds are met,
        ``EXIT_THRESHOLD_BREACH`` (1) if any are exceeded, or
        ``EXIT_SCRIPT_ERROR`` (2) on unexpected failures.
    """
    args = parse_args(argv)

    try:
        thresholds = load_thresholds(args.thresholds)
        summary = _load_summary(args.summary)
        results = evaluate_thresholds(summary, thresholds)
    except (OSError, KeyError, TypeError, ValueError) as exc:
        print(f"Threshold check failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    passed = all_passed(results)
    _print_summary(results, passed)
    return EXIT_PASS if passed else EXIT_THRESHOLD_BREACH


if __name__ == "__main__":
    raise SystemExit(main())
