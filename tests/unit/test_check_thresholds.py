"""
Unit tests for the threshold-checker CLI.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from loadtest.check_thresholds import (
    DEFAULT_THRESHOLDS,
    EXIT_PASS,
    EXIT_SCRIPT_ERROR,
    EXIT_THRESHOLD_BREACH,
    main,
)

pytestmark = pytest.mark.unit


def _write_summary(path: Path, *, p95: float, success_rate: float) -> Path:
    summary = {
        "requests": {"failure_rate": 0.0},
        "chat_request": {"p95_ms": p95, "p99_ms": p95},
        "custom_metrics": {
            "checks": {"rate": 1.0},
            "successful_chat_interactions": {"success_ratio": success_rate},
        },
    }
    path.write_text(json.dumps(summary), encoding="utf-8")
    return path


def test_passing_summary_exits_zero(tmp_path, capsys):
    # Arrange
    summary = _write_summary(tmp_path / "summary.json", p95=800.0, success_rate=1.0)

    # Act
    code = main(["--summary", str(summary), "--thresholds", str(DEFAULT_THRESHOLDS)])

    # Assert
    assert code == EXIT_PASS
    assert "Overall: PASS" in capsys.readouterr().out


def test_breach_exits_one(tmp_path, capsys):
    summary = _write_summary(tmp_path / "summary.json", p95=5000.0, success_rate=1.0)

    code = main(["--summary", str(summary)])

    output = capsys.readouterr().out
    assert code == EXIT_THRESHOLD_BREACH
    assert "max_p95_ms" in output
    assert "Overall: FAIL" in output


def test_missing_summary_exits_two(tmp_path, capsys):
    code = main(["--summary", str(tmp_path / "absent.json")])

    assert code == EXIT_SCRIPT_ERROR
    assert "Threshold check failed" in capsys.readouterr().err


def test_non_object_summary_exits_two(tmp_path):
    path = tmp_path / "summary.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert main(["--summary", str(path)]) == EXIT_SCRIPT_ERROR


def test_incomplete_summary_exits_two(tmp_path):
    path = tmp_path / "summary.json"
    path.write_text(json.dumps({"requests": {}}), encoding="utf-8")

    assert main(["--summary", str(path)]) == EXIT_SCRIPT_ERROR
