"""Run-scoped state shared by the listeners and the Locust users."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from config import ChatLoadSettings
from loadtest.metrics import ChatMetrics
from loadtest.session import SessionRegistry

# Attribute under which the context hangs off ``locust.env.Environment``.
CONTEXT_ATTR = "chat_context"


@dataclass
class ChatRunContext:
    """Everything one run needs beyond Locust's own environment."""

    settings: ChatLoadSettings
    queries: tuple[str, ...]
    sessions: SessionRegistry = field(default_factory=SessionRegistry)
    metrics: ChatMetrics = field(default_factory=ChatMetrics)
    started_at: datetime | None = None

    def mark_started(self) -> None:
        self.started_at = datetime.now(timezone.utc)


def attach_context(environment, context: ChatRunContext) -> ChatRunContext:
    setattr(environment, CONTEXT_ATTR, context)
    return context


def get_context(environment) -> ChatRunContext | None:
    return getattr(environment, CONTEXT_ATTR, None)
