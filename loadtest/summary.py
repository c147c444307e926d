"""
End-of-run summary record.

Combines Locust's aggregated request statistics with the custom chat
metrics into a single JSON document (``summary.json`` by default) that
CI jobs archive and feed to :mod:`loadtest.check_thresholds`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from locust.stats import RequestStats, StatsEntry

from loadtest.helpers import CHAT_REQUEST_NAME
from loadtest.metrics import ChatMetrics
from loadtest.thresholds import ThresholdResult

logger = logging.getLogger(__name__)


def _entry_summary(entry: StatsEntry | None) -> dict[str, Any]:
    if entry is None or entry.num_requests == 0:
        return {
            "requests": 0,
            "failures": 0,
            "failure_rate": 0.0,
            "avg_ms": 0.0,
            "median_ms": 0.0,
            "p95_ms": 0.0,
            "p99_ms": 0.0,
            "max_ms": 0.0,
            "rps": 0.0,
        }

    return {
        "requests": entry.num_requests,
        "failures": entry.num_failures,
        "failure_rate": entry.fail_ratio,
        "avg_ms": entry.avg_response_time,
        "median_ms": entry.median_response_time,
        "p95_ms": entry.get_response_time_percentile(0.95),
        "p99_ms": entry.get_response_time_percentile(0.99),
        "max_ms": entry.max_response_time,
        "rps": entry.total_rps,
    }


def build_summary(
    stats: RequestStats,
    metrics: ChatMetrics,
    *,
    host: str,
    started_at: datetime | None,
    conversations_in_progress: int = 0,
) -> dict[str, Any]:
    """
    Build the summary record for a finished run.

    Args:
        stats: Locust's request statistics for the run.
        metrics: The run's custom chat metrics.
        host: Target host the run was pointed at.
        started_at: When the run started, if known.
        conversations_in_progress: Users holding a conversation id at the
            end of the run.

    Returns:
        A JSON-serialisable dictionary.
    """
    summary: dict[str, Any] = {
        "started_at": started_at.isoformat() if started_at else None,
        "finished_at": datetime.now(timezone.utc).isoformat(),
        "host": host,
        "requests": _entry_summary(stats.total),
        "chat_request": _entry_summary(stats.entries.get((CHAT_REQUEST_NAME, "POST"))),
        "custom_metrics": metrics.as_dict(),
        "conversations_in_progress": conversations_in_progress,
    }
    return summary


def write_summary(path: Path, summary: dict[str, Any]) -> Path:
    """Write *summary* to *path* as indented JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(summary, handle, indent=2)
    logger.info("Run summary written to %s", path)
    return path


def attach_threshold_results(summary: dict[str, Any], results: list[ThresholdResult]) -> dict[str, Any]:
    """Embed threshold results under the ``thresholds`` key of *summary*."""
    summary["thresholds"] = {result.name: result.as_dict() for result in results}
    summary["thresholds_passed"] = all(result.passed for result in results)
    return summary
