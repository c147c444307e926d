"""
Conversational chat Locust scenario.

Defines :class:`DifyChatUser`, the scenario the original run shape was
built around: every virtual user asks one randomly chosen question per
iteration, keeps the conversation id the server assigns on its first
successful answer, and pauses 2–5 seconds (by default) between
questions to simulate reading time.
"""

from __future__ import annotations

from locust import tag, task

from loadtest.scenarios.base import ChatApiUser


@tag("chat")
class DifyChatUser(ChatApiUser):
    """Ask questions within a single ongoing conversation."""

    @task
    def chat(self) -> None:
        """Send one question, continuing the user's conversation if any."""
        self._chat()
