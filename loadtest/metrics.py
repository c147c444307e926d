"""
Custom chat metrics tracked alongside Locust's request statistics.

Locust already records latency and HTTP failures per request name.
These counters add the chat-level view: how many exchanges passed both
checks (status 200 and a non-empty body), how many failed, and how
often a user managed to pick up a conversation identifier.

Each virtual user runs on a gevent greenlet inside one process, so a
single increment never interleaves with another and no locking is
needed.  In distributed runs, workers ship their counters to the
master with every stats report (see :mod:`loadtest.listeners`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SUCCESS_METRIC = "successful_chat_interactions"
FAILURE_METRIC = "failed_chat_interactions"

COUNTER_FIELDS = (
    "successful_chat_interactions",
    "failed_chat_interactions",
    "checks_passed",
    "checks_failed",
    "conversations_started",
    "conversation_id_misses",
)


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else 0.0


@dataclass
class ChatMetrics:
    """Append-only counters for one run (or one worker between reports)."""

    successful_chat_interactions: int = 0
    failed_chat_interactions: int = 0
    checks_passed: int = 0
    checks_failed: int = 0
    conversations_started: int = 0
    conversation_id_misses: int = 0

    @property
    def total_interactions(self) -> int:
        return self.successful_chat_interactions + self.failed_chat_interactions

    @property
    def success_rate(self) -> float:
        return _ratio(self.successful_chat_interactions, self.total_interactions)

    @property
    def failure_rate(self) -> float:
        return _ratio(self.failed_chat_interactions, self.total_interactions)

    @property
    def checks_rate(self) -> float:
        return _ratio(self.checks_passed, self.checks_passed + self.checks_failed)

    def record_checks(self, passed: int, failed: int) -> None:
        self.checks_passed += passed
        self.checks_failed += failed

    def record_success(self) -> None:
        self.successful_chat_interactions += 1

    def record_failure(self) -> None:
        self.failed_chat_interactions += 1

    def record_conversation_started(self) -> None:
        self.conversations_started += 1

    def record_conversation_miss(self) -> None:
        self.conversation_id_misses += 1

    def drain(self) -> dict[str, int]:
        """Return the raw counters and reset them to zero.

        Workers call this on each report to the master so that every
        increment is shipped exactly once.
        """
        counts = {name: getattr(self, name) for name in COUNTER_FIELDS}
        for name in COUNTER_FIELDS:
            setattr(self, name, 0)
        return counts

    def merge(self, counts: dict[str, int]) -> None:
        """Add counters received from a worker."""
        for name in COUNTER_FIELDS:
            setattr(self, name, getattr(self, name) + int(counts.get(name, 0)))

    def as_dict(self) -> dict[str, Any]:
        """Return the counters and derived rates as a JSON-ready dict.

        ``success_ratio`` is the share of exchanges that succeeded, not a
        per-second rate.
        """
        return {
            SUCCESS_METRIC: {
                "count": self.successful_chat_interactions,
                "success_ratio": self.success_rate,
            },
            FAILURE_METRIC: {
                "count": self.failed_chat_interactions,
                "rate": self.failure_rate,
            },
            "checks": {
                "passes": self.checks_passed,
                "fails": self.checks_failed,
                "rate": self.checks_rate,
            },
            "conversations_started": self.conversations_started,
            "conversation_id_misses": self.conversation_id_misses,
        }
