"""
Stub chat routes.

Implements just enough of the Dify chat API for the load test:

  * ``GET /health`` — liveness probe used by test fixtures
  * ``POST /chat-messages`` — validates the bearer token and body, then
    streams an answer as server-sent events

The streamed body is a sequence of blank-line separated blocks:

    event: ping

    data: {"event": "message", "conversation_id": "...", "answer": "..."}

    data: {"event": "message_end", "conversation_id": "...", ...}

A conversation id sent by the client is echoed back unchanged; without
one, a new ``<prefix>-<hex>`` id is assigned.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Iterator
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


def _sse_data(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def _answer_chunks(query: str, chunks: int) -> list[str]:
    """Split a canned answer into *chunks* roughly equal pieces."""
    answer = f"This is a stub answer to: {query}"
    size = max(1, -(-len(answer) // max(1, chunks)))
    return [answer[i:i + size] for i in range(0, len(answer), size)]


def stream_answer(query: str, conversation_id: str, config: dict[str, Any]) -> Iterator[str]:
    """
    Yield the SSE blocks for one answer.

    Args:
        query: The user's question.
        conversation_id: The id to stamp on every data block.
        config: The Flask app config (read for the ``STUB_*`` flags).
    """
    task_id = uuid.uuid4().hex
    message_id = uuid.uuid4().hex
    created_at = int(time.time())

    if config["STUB_EMIT_PING"]:
        yield "event: ping\n\n"
    if config["STUB_EMIT_MALFORMED_BLOCK"]:
        yield "data: {not json\n\n"

    for chunk in _answer_chunks(query, config["STUB_MESSAGE_CHUNKS"]):
        yield _sse_data({
            "event": "message",
            "task_id": task_id,
            "message_id": message_id,
            "conversation_id": conversation_id,
            "answer": chunk,
            "created_at": created_at,
        })

    yield _sse_data({
        "event": "message_end",
        "task_id": task_id,
        "message_id": message_id,
        "conversation_id": conversation_id,
        "metadata": {},
    })


@chat_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Shallow health probe for the stub itself."""
    return jsonify({"status": "healthy", "service": "stub-chat"}), 200


@chat_bp.route("/chat-messages", methods=["POST"])
def chat_messages():
    """
    Accept a chat message and stream an answer.

    Returns:
        ``401`` for a missing or wrong bearer token, ``400`` for a body
        without a non-empty ``query``, otherwise a ``200`` streaming
        ``text/event-stream`` response.
    """
    if _bearer_token() != current_app.config["STUB_API_TOKEN"]:
        return jsonify({"code": "unauthorized", "message": "Invalid access token"}), 401

    body = request.get_json(silent=True) or {}
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        return jsonify({"code": "invalid_param", "message": "query is required"}), 400

    conversation_id = body.get("conversation_id")
    if not isinstance(conversation_id, str) or not conversation_id:
        conversation_id = f"{current_app.config['STUB_CONVERSATION_PREFIX']}-{uuid.uuid4().hex}"
        logger.info("New conversation %s for user %s", conversation_id, body.get("user"))

    stream = stream_answer(query, conversation_id, dict(current_app.config))
    return Response(stream_with_context(stream), mimetype="text/event-stream")
