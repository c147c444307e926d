"""
Server-sent-event parsing for streamed chat responses.

The chat endpoint answers with ``text/event-stream``: a sequence of
blocks separated by blank lines.  Blocks of interest begin with a
literal ``data:`` marker followed by a JSON payload; some of those
payloads carry the server-assigned ``conversation_id``.

Parsing is deliberately forgiving.  A block whose payload is not valid
JSON is counted and skipped, and scanning continues with the next
block.  The outcome is reported as an :class:`ExtractionResult` so that
callers can tell "no identifier in the stream" apart from "the stream
was malformed".
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

DATA_MARKER = "data:"
BLOCK_SEPARATOR = "\n\n"


class ExtractionStatus(Enum):
    """Outcome of scanning a response body for a conversation id."""

    FOUND = "found"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ChatResponseEvent:
    """A single ``data:`` block with its decoded JSON payload."""

    payload: Any

    @property
    def conversation_id(self) -> str | None:
        """The non-empty string ``conversation_id`` of the payload, if any."""
        if not isinstance(self.payload, dict):
            return None
        value = self.payload.get("conversation_id")
        if isinstance(value, str) and value:
            return value
        return None


@dataclass(frozen=True)
class ExtractionResult:
    """
    Result of scanning a body for a conversation identifier.

    Attributes:
        status: ``FOUND`` when an identifier was extracted, ``MALFORMED``
            when none was found and at least one block failed to parse,
            ``ABSENT`` otherwise.
        conversation_id: The first identifier found, or ``None``.
        blocks_scanned: Number of ``data:`` blocks inspected.
        malformed_blocks: Number of those blocks that were not valid JSON.
    """

    status: ExtractionStatus
    conversation_id: str | None = None
    blocks_scanned: int = 0
    malformed_blocks: int = 0

    @property
    def found(self) -> bool:
        return self.status is ExtractionStatus.FOUND


def split_event_blocks(body: str) -> list[str]:
    """Split a stream body into non-blank event blocks."""
    normalised = body.replace("\r\n", "\n")
    return [block for block in normalised.split(BLOCK_SEPARATOR) if block.strip()]


def parse_data_block(block: str) -> ChatResponseEvent | None:
    """
    Decode one ``data:`` block.

    Args:
        block: A single event block as produced by :func:`split_event_blocks`.

    Returns:
        The decoded event, or ``None`` if the block is not a ``data:``
        block or carries an empty payload.

    Raises:
        ValueError: If the payload is not valid JSON.
    """
    if not block.startswith(DATA_MARKER):
        return None

    data = block[len(DATA_MARKER):].strip()
    if not data:
        return None

    return ChatResponseEvent(payload=json.loads(data))


def scan_conversation_id(body: str) -> ExtractionResult:
    """
    Scan *body* for the first non-empty ``conversation_id``.

    Scanning stops at the first identifier found.  Malformed blocks are
    counted but never abort the scan.
    """
    scanned = 0
    malformed = 0

    for block in split_event_blocks(body):
        if not block.startswith(DATA_MARKER):
            continue
        scanned += 1
        try:
            event = parse_data_block(block)
        except ValueError:
            malformed += 1
            continue
        if event is None:
            continue

        conversation_id = event.conversation_id
        if conversation_id:
            return ExtractionResult(
                status=ExtractionStatus.FOUND,
                conversation_id=conversation_id,
                blocks_scanned=scanned,
                malformed_blocks=malformed,
            )

    status = ExtractionStatus.MALFORMED if malformed else ExtractionStatus.ABSENT
    return ExtractionResult(status=status, blocks_scanned=scanned, malformed_blocks=malformed)
