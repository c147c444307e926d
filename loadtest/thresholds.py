"""
Pass/fail thresholds for a chat load-test run.

Limits live in :file:`thresholds.yml` and are checked against the run
summary produced by :mod:`loadtest.summary`:

- **P95 / P99 latency (ms)** of the chat request
- **HTTP failure rate** across all requests
- **Checks rate** — share of status/body checks that passed
- **Success rate** — share of chat exchanges that passed both checks
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from loadtest.metrics import SUCCESS_METRIC

# Threshold key -> comparison.  Limits are strict: "max" passes when
# actual < limit, "min" passes when actual > limit.
THRESHOLD_KEYS: dict[str, str] = {
    "max_p95_ms": "max",
    "max_p99_ms": "max",
    "max_http_failure_rate": "max",
    "min_checks_rate": "min",
    "min_success_rate": "min",
}


@dataclass(frozen=True)
class ThresholdResult:
    """One metric compared against its limit."""

    name: str
    actual: float
    limit: float
    passed: bool

    def as_dict(self) -> dict[str, Any]:
        return {"actual": self.actual, "limit": self.limit, "passed": self.passed}


def load_thresholds(path: Path) -> dict[str, float]:
    """
    Read threshold limits from a YAML file.

    Args:
        path: Path to a YAML file defining every key in
            :data:`THRESHOLD_KEYS`.

    Returns:
        A dictionary of threshold values as floats.

    Raises:
        ValueError: If any key is missing or non-numeric.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    try:
        return {key: float(data[key]) for key in THRESHOLD_KEYS}
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(
            "Thresholds file must define numeric " + ", ".join(THRESHOLD_KEYS)
        ) from exc


def _actual_values(summary: dict[str, Any]) -> dict[str, float]:
    """Pick the value each threshold is compared against out of a summary."""
    chat = summary["chat_request"]
    custom = summary["custom_metrics"]
    return {
        "max_p95_ms": float(chat["p95_ms"]),
        "max_p99_ms": float(chat["p99_ms"]),
        "max_http_failure_rate": float(summary["requests"]["failure_rate"]),
        "min_checks_rate": float(custom["checks"]["rate"]),
        "min_success_rate": float(custom[SUCCESS_METRIC]["success_ratio"]),
    }


def evaluate_thresholds(
    summary: dict[str, Any],
    thresholds: dict[str, float],
) -> list[ThresholdResult]:
    """
    Compare a run summary against threshold limits.

    Args:
        summary: A summary dict as built by
            :func:`loadtest.summary.build_summary`.
        thresholds: Limits as returned by :func:`load_thresholds`.

    Returns:
        One :class:`ThresholdResult` per configured threshold, in
        :data:`THRESHOLD_KEYS` order.

    Raises:
        KeyError: If the summary lacks a required section.
    """
    actual = _actual_values(summary)
    results = []
    for name, kind in THRESHOLD_KEYS.items():
        if name not in thresholds:
            continue
        limit = thresholds[name]
        value = actual[name]
        passed = value < limit if kind == "max" else value > limit
        results.append(ThresholdResult(name=name, actual=value, limit=limit, passed=passed))
    return results


def all_passed(results: list[ThresholdResult]) -> bool:
    return all(result.passed for result in results)
