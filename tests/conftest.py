"""
Shared pytest fixtures for the chat load-test suite.

Fixtures follow the Arrange-Act-Assert (AAA) pattern and ensure test
isolation by providing a fresh session registry, metrics and Locust
environment for each test.

Key Concepts Demonstrated:
- Environment variables set before importing configuration
- Fake Locust HTTP session for exercising users without a network
- Test data factories for streamed SSE bodies
"""

from __future__ import annotations

# Locust monkey-patches the stdlib through gevent on import, so it has to
# load before requests/urllib3 pull in ssl from any other conftest.
import locust  # noqa: F401

import json
import os
from pathlib import Path
from typing import Any

import pytest
from faker import Faker

# Select the testing configuration before anything imports ``config``.
os.environ["LOADTEST_ENV"] = "testing"
os.environ["FLASK_ENV"] = "testing"

from config import ChatLoadSettings, TestingConfig, load_settings
from loadtest.context import ChatRunContext
from loadtest.metrics import ChatMetrics
from loadtest.queries import DEFAULT_QUERY_POOL
from loadtest.session import SessionRegistry

fake = Faker()


# -----------------------------------------------------------------------------
# Fake Locust HTTP session
# -----------------------------------------------------------------------------

class FakeChatResponse:
    """
    Minimal stand-in for Locust's ``ResponseContextManager``.

    Records whether the request was marked as a success or a failure so
    tests can assert on what would show up in Locust's statistics.
    """

    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.marked: str | None = None
        self.failure_message: str | None = None

    def __enter__(self) -> FakeChatResponse:
        return self

    def __exit__(self, *_exc: Any) -> bool:
        return False

    def success(self) -> None:
        self.marked = "success"

    def failure(self, message: str) -> None:
        self.marked = "failure"
        self.failure_message = message


class FakeHttpSession:
    """Records ``post`` calls and replays queued responses in order."""

    def __init__(self, responses: list[FakeChatResponse] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    def queue(self, *responses: FakeChatResponse) -> None:
        self.responses.extend(responses)

    def post(self, url: str, **kwargs: Any) -> FakeChatResponse:
        self.calls.append({"url": url, **kwargs})
        return self.responses.pop(0)


# -----------------------------------------------------------------------------
# Data factories
# -----------------------------------------------------------------------------

def sse_body(*payloads: Any, raw_blocks: tuple[str, ...] = ()) -> str:
    """
    Build a streamed body from payload dicts.

    Each payload becomes a ``data: <json>`` block; *raw_blocks* are
    emitted first, verbatim, to model pings and malformed chunks.
    """
    blocks = list(raw_blocks) + [f"data: {json.dumps(payload)}" for payload in payloads]
    return "".join(f"{block}\n\n" for block in blocks)


@pytest.fixture
def conversation_id() -> str:
    """A random server-style conversation id."""
    return f"conv-{fake.uuid4()}"


@pytest.fixture
def stream_with_id(conversation_id):
    """Factory for a well-formed stream carrying *conversation_id*."""

    def _build(conv_id: str | None = None) -> str:
        conv = conv_id or conversation_id
        return sse_body(
            {"event": "message", "conversation_id": conv, "answer": fake.sentence()},
            {"event": "message_end", "conversation_id": conv},
            raw_blocks=("event: ping",),
        )

    return _build


# -----------------------------------------------------------------------------
# Run context fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> ChatLoadSettings:
    """Validated testing settings writing their summary under *tmp_path*."""
    base = load_settings(TestingConfig)
    return ChatLoadSettings(
        host=base.host,
        app_id=base.app_id,
        token=base.token,
        request_timeout=base.request_timeout,
        think_time_min=base.think_time_min,
        think_time_max=base.think_time_max,
        summary_path=tmp_path / "summary.json",
        thresholds_path=base.thresholds_path,
    )


@pytest.fixture
def metrics() -> ChatMetrics:
    return ChatMetrics()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def run_context(settings, metrics, registry) -> ChatRunContext:
    return ChatRunContext(
        settings=settings,
        queries=DEFAULT_QUERY_POOL,
        sessions=registry,
        metrics=metrics,
    )


@pytest.fixture
def fake_session() -> FakeHttpSession:
    return FakeHttpSession()
