"""
Unit tests for the custom chat metrics.
"""

import pytest

from loadtest.metrics import FAILURE_METRIC, SUCCESS_METRIC, ChatMetrics

pytestmark = pytest.mark.unit


def test_rates_are_zero_before_any_interaction():
    metrics = ChatMetrics()

    assert metrics.total_interactions == 0
    assert metrics.success_rate == 0.0
    assert metrics.failure_rate == 0.0
    assert metrics.checks_rate == 0.0


def test_success_and_failure_rates():
    # Arrange
    metrics = ChatMetrics()

    # Act
    for _ in range(3):
        metrics.record_success()
    metrics.record_failure()

    # Assert
    assert metrics.total_interactions == 4
    assert metrics.success_rate == pytest.approx(0.75)
    assert metrics.failure_rate == pytest.approx(0.25)


def test_checks_rate_counts_individual_checks():
    metrics = ChatMetrics()

    metrics.record_checks(passed=2, failed=0)
    metrics.record_checks(passed=1, failed=1)

    assert metrics.checks_passed == 3
    assert metrics.checks_failed == 1
    assert metrics.checks_rate == pytest.approx(0.75)


def test_as_dict_uses_metric_names():
    # Arrange
    metrics = ChatMetrics()
    metrics.record_success()
    metrics.record_conversation_started()
    metrics.record_conversation_miss()

    # Act
    data = metrics.as_dict()

    # Assert
    assert data[SUCCESS_METRIC] == {"count": 1, "success_ratio": 1.0}
    assert data[FAILURE_METRIC] == {"count": 0, "rate": 0.0}
    assert data["conversations_started"] == 1
    assert data["conversation_id_misses"] == 1


def test_drain_returns_counts_and_resets():
    # Arrange
    metrics = ChatMetrics()
    metrics.record_success()
    metrics.record_checks(passed=2, failed=0)

    # Act
    counts = metrics.drain()

    # Assert
    assert counts["successful_chat_interactions"] == 1
    assert counts["checks_passed"] == 2
    assert metrics.total_interactions == 0
    assert metrics.checks_passed == 0


def test_merge_adds_worker_counts():
    master = ChatMetrics(successful_chat_interactions=1)

    master.merge({"successful_chat_interactions": 2, "failed_chat_interactions": 1})
    master.merge({})

    assert master.successful_chat_interactions == 3
    assert master.failed_chat_interactions == 1
