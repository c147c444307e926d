"""
Per-user conversation tracking.

Every simulated user owns a :class:`VirtualUserState`.  Its
``conversation_id`` starts empty.  It is filled in once, by the first
successful exchange whose streamed response carries a server-assigned
identifier, and is then sent with every later request so the chat
server keeps the exchanges in one dialogue.

States are created through a :class:`SessionRegistry` that belongs to
the run, not to this module.  The Locust user that owns a state passes
it explicitly into :func:`build_request` and :func:`record_outcome`.
"""

from __future__ import annotations

import itertools
import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from loadtest.metrics import ChatMetrics
from loadtest.sse import ExtractionResult, ExtractionStatus, scan_conversation_id

logger = logging.getLogger(__name__)

USER_ID_PREFIX = "anon_user_"


@dataclass
class VirtualUserState:
    """Conversation state for one simulated user."""

    user_id: str
    conversation_id: str | None = None

    @property
    def in_conversation(self) -> bool:
        return self.conversation_id is not None

    def adopt_conversation(self, conversation_id: str) -> bool:
        """
        Store *conversation_id* unless one is already set.

        Returns:
            ``True`` if the identifier was stored, ``False`` if the state
            already carried one (the existing identifier is kept).
        """
        if self.conversation_id is not None:
            return False
        self.conversation_id = conversation_id
        return True


@dataclass(frozen=True)
class ChatRequest:
    """One outgoing chat message."""

    query: str
    user_id: str
    conversation_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Build the ``/chat-messages`` JSON body.

        ``conversation_id`` is left out entirely when absent, which tells
        the server to start a new conversation.
        """
        payload: dict[str, Any] = {
            "inputs": {},
            "query": self.query,
            "response_mode": "streaming",
            "user": self.user_id,
        }
        if self.conversation_id:
            payload["conversation_id"] = self.conversation_id
        return payload


class SessionRegistry:
    """
    Lookup of :class:`VirtualUserState` objects for one run.

    Hands out sequential user ids (``anon_user_1``, ``anon_user_2``, ...)
    and creates states lazily.  States are never removed during a run.
    """

    def __init__(self, prefix: str = USER_ID_PREFIX) -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._states: dict[str, VirtualUserState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._states

    def allocate_user_id(self, worker_index: int | None = None) -> str:
        """
        Return the next user id.

        Workers in a distributed run each own a registry, so their ids
        carry the worker index (``anon_user_w2_1``) to stay unique.
        """
        number = next(self._counter)
        if worker_index is None:
            return f"{self._prefix}{number}"
        return f"{self._prefix}w{worker_index}_{number}"

    def get_or_create_state(self, user_id: str) -> VirtualUserState:
        """Return the state for *user_id*, creating an empty one if needed."""
        state = self._states.get(user_id)
        if state is None:
            state = VirtualUserState(user_id=user_id)
            self._states[user_id] = state
        return state

    def conversations_in_progress(self) -> int:
        """Number of users that have adopted a conversation id."""
        return sum(1 for state in self._states.values() if state.in_conversation)


def build_request(
    state: VirtualUserState,
    query_pool: Sequence[str],
    rng: random.Random | None = None,
) -> ChatRequest:
    """
    Pick a random query and attach the user's current conversation id.

    Args:
        state: The calling user's state.
        query_pool: Fixed pool of questions to choose from.
        rng: Optional random source (tests pass a seeded one).

    Raises:
        ValueError: If *query_pool* is empty.
    """
    if not query_pool:
        raise ValueError("query_pool must contain at least one query")

    chooser = rng or random
    return ChatRequest(
        query=chooser.choice(query_pool),
        user_id=state.user_id,
        conversation_id=state.conversation_id,
    )


def extract_conversation_id(response_body: str) -> str | None:
    """Return the first conversation id in a streamed body, or ``None``."""
    return scan_conversation_id(response_body).conversation_id


def record_outcome(
    state: VirtualUserState,
    response_body: str | bytes | None,
    success: bool,
    metrics: ChatMetrics | None = None,
) -> ExtractionResult | None:
    """
    Count one exchange and, on first success, adopt its conversation id.

    Extraction only runs when the exchange succeeded and the user has no
    conversation yet; once a state holds an identifier it is never
    scanned for again.

    Args:
        state: The calling user's state.
        response_body: The full streamed body (``str`` or raw ``bytes``).
        success: Whether the exchange passed its checks.
        metrics: Counters to update, if any.

    Returns:
        The extraction result when extraction ran, otherwise ``None``.
    """
    if metrics is not None:
        if success:
            metrics.record_success()
        else:
            metrics.record_failure()

    if not success or state.in_conversation or not response_body:
        return None

    try:
        text = response_body.decode("utf-8") if isinstance(response_body, bytes) else response_body
        result = scan_conversation_id(text)
    except ValueError as exc:
        logger.warning(
            "%s: Error parsing streaming body for conversation ID: %s", state.user_id, exc
        )
        if metrics is not None:
            metrics.record_conversation_miss()
        return None

    if result.found and state.adopt_conversation(result.conversation_id):
        logger.info("%s: Extracted new conversation ID: %s", state.user_id, result.conversation_id)
        if metrics is not None:
            metrics.record_conversation_started()
        return result

    if metrics is not None:
        metrics.record_conversation_miss()
    if result.status is ExtractionStatus.MALFORMED:
        logger.warning(
            "%s: No conversation ID in response; %d of %d data blocks were malformed",
            state.user_id,
            result.malformed_blocks,
            result.blocks_scanned,
        )
    else:
        logger.debug("%s: No conversation ID in response", state.user_id)
    return result
