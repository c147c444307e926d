"""
Helper utilities for the chat load-test scenarios.

Wraps the single HTTP exchange every simulated user performs: posting a
chat message to ``/chat-messages`` and validating the streamed answer
with Locust's ``catch_response`` protocol.

Key Concepts Demonstrated:
- Reusable request helper around ``catch_response`` so failures show up
  in Locust's statistics with a readable message
- Check bookkeeping kept separate from the HTTP call
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from locust.clients import HttpSession

from loadtest.session import ChatRequest

logger = logging.getLogger(__name__)

CHAT_ENDPOINT = "/chat-messages"
CHAT_REQUEST_NAME = "Chat with Dify App"

# Maximum characters of a response body echoed into failure messages.
MAX_FAILURE_BODY_CHARS = 200


@dataclass(frozen=True)
class ChatExchange:
    """Outcome of one chat request after both checks ran."""

    status_code: int
    body: str
    status_ok: bool
    body_present: bool

    @property
    def success(self) -> bool:
        return self.status_ok and self.body_present

    @property
    def checks_passed(self) -> int:
        return int(self.status_ok) + int(self.body_present)

    @property
    def checks_failed(self) -> int:
        return 2 - self.checks_passed


def chat_headers(token: str) -> dict[str, str]:
    """
    Build the headers the chat endpoint expects for a streamed answer.

    Args:
        token: The Dify app's public bearer token.

    Returns:
        A dictionary suitable for passing as ``headers`` to Locust
        request methods.
    """
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
        "Accept": "text/event-stream",
    }


def _failure_message(status_code: int, body: str) -> str:
    snippet = body if len(body) <= MAX_FAILURE_BODY_CHARS else body[:MAX_FAILURE_BODY_CHARS] + "..."
    return f"{status_code} - {snippet}"


def send_chat(
    client: HttpSession,
    chat_request: ChatRequest,
    *,
    headers: dict[str, str],
    timeout: float,
) -> ChatExchange:
    """
    POST one chat message and check the streamed response.

    The exchange succeeds when the status is ``200`` and the body is
    not empty.  Anything else (including a timeout, which Locust reports
    as status ``0``) is marked as a failure in Locust's statistics.
    No retry is attempted.

    Args:
        client: The Locust HTTP session.
        chat_request: The message to send.
        headers: Headers from :func:`chat_headers`.
        timeout: Seconds allowed to receive the full stream.

    Returns:
        A :class:`ChatExchange` describing the response.
    """
    with client.post(
        CHAT_ENDPOINT,
        json=chat_request.to_payload(),
        headers=headers,
        name=CHAT_REQUEST_NAME,
        timeout=timeout,
        catch_response=True,
    ) as response:
        status_code = response.status_code or 0
        body = response.text or ""
        exchange = ChatExchange(
            status_code=status_code,
            body=body,
            status_ok=status_code == 200,
            body_present=len(body) > 0,
        )

        if exchange.success:
            response.success()
        else:
            message = _failure_message(status_code, body)
            logger.error("%s: Chat failed: %s", chat_request.user_id, message)
            response.failure(message)

        return exchange
