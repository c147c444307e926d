"""
Shared abstract Locust user class for chat scenarios.

:class:`ChatApiUser` resolves the run context at startup, claims a user
id and conversation state from the run's session registry, and exposes
one primitive, :meth:`ChatApiUser._chat`, that performs a full
build → send → record cycle.

Concrete user classes (e.g.
:class:`~loadtest.scenarios.chat.DifyChatUser`) only need to declare
Locust ``@task`` methods that delegate to it.

Key Concepts Demonstrated:
- Abstract Locust base classes for DRY scenario authoring
- Per-user state owned by the user instance and passed explicitly
- Configurable think time via a ``wait_time`` method
"""

from __future__ import annotations

import random

from locust import HttpUser
from locust.exception import StopUser
from locust.runners import WorkerRunner

from loadtest.context import ChatRunContext, get_context
from loadtest.helpers import ChatExchange, chat_headers, send_chat
from loadtest.session import VirtualUserState, build_request, record_outcome


class ChatApiUser(HttpUser):
    """
    Base user that talks to the Dify chat endpoint.

    ``abstract = True`` tells Locust not to spawn this class directly.

    Attributes:
        run_context: The run context attached to the Locust environment.
        state: This user's conversation state.
        headers: Pre-built header dict reused for every request.
    """

    abstract = True

    run_context: ChatRunContext
    state: VirtualUserState
    headers: dict[str, str]

    def wait_time(self) -> float:
        """Random think time between the configured bounds."""
        settings = self.run_context.settings
        return random.uniform(settings.think_time_min, settings.think_time_max)

    def on_start(self) -> None:
        """Claim a user id and conversation state for this virtual user."""
        context = get_context(self.environment)
        if context is None:
            raise StopUser("Chat run context is not configured")

        self.run_context = context
        user_id = context.sessions.allocate_user_id(self._worker_index())
        self.state = context.sessions.get_or_create_state(user_id)
        self.headers = chat_headers(context.settings.token)

    def _worker_index(self) -> int | None:
        runner = self.environment.runner
        if isinstance(runner, WorkerRunner) and runner.worker_index >= 0:
            return runner.worker_index
        return None

    def _chat(self) -> ChatExchange:
        """Send one randomly chosen question and record the outcome."""
        chat_request = build_request(self.state, self.run_context.queries)
        exchange = send_chat(
            self.client,
            chat_request,
            headers=self.headers,
            timeout=self.run_context.settings.request_timeout,
        )

        metrics = self.run_context.metrics
        metrics.record_checks(exchange.checks_passed, exchange.checks_failed)
        record_outcome(self.state, exchange.body, exchange.success, metrics)
        return exchange
