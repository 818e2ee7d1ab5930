"""Incremental decoder for the server-sent answer stream.

Bytes arrive in arbitrary chunks: one frame may span several reads and one
read may hold several frames. The decoder keeps a single text buffer, emits
every complete frame and carries the trailing partial frame forward.
"""

import codecs
import json
import logging
import re
from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any

import httpx

from chat_widget.errors import ProtocolFrameError
from chat_widget.streaming.cancellation import CancellationToken
from chat_widget.streaming.events import ErrorEvent, StreamEvent, event_from_payload

logger = logging.getLogger(__name__)

# Blank line between frames, tolerant of CRLF line endings
FRAME_BOUNDARY = re.compile(r"\r?\n\r?\n")
LINE_BREAK = re.compile(r"\r?\n")

COMMENT_PREFIX = ":"
DEFAULT_EVENT_TYPE = "message"


def _parse_payload(data: str) -> dict[str, Any]:
    """Parse a frame's data text as a JSON object.

    Raises:
        ProtocolFrameError: If the text is not valid JSON.
    """
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        raise ProtocolFrameError(f"Invalid frame payload: {e}") from e

    return payload if isinstance(payload, dict) else {}


def parse_frame(raw: str) -> StreamEvent | None:
    """Turn one complete frame into an event.

    Args:
        raw: Frame text without its terminating blank line.

    Returns:
        The decoded event, or None for heartbeats, empty frames and
        unrecognized event types.
    """
    event_type = DEFAULT_EVENT_TYPE
    data = ""

    for line in LINE_BREAK.split(raw):
        if line.startswith(COMMENT_PREFIX):
            continue
        if line.startswith("event:"):
            event_type = line[6:].strip()
        elif line.startswith("data:"):
            data += line[5:].strip()

    if not data:
        return None

    try:
        payload = _parse_payload(data)
    except ProtocolFrameError as e:
        # One bad frame must not kill an otherwise healthy stream
        logger.debug(f"Dropping payload of malformed {event_type} frame: {e}")
        payload = {}

    return event_from_payload(event_type, payload)


class FrameDecoder:
    """Buffering frame splitter for a chunked text event stream."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._tail = ""
        self._text = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def pending(self) -> str:
        """Text of the trailing, not yet terminated frame."""
        return "".join(self._parts)

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """Append a chunk and return the events of every frame it completes."""
        if isinstance(chunk, bytes):
            chunk = self._text.decode(chunk)
        if not chunk:
            return []

        # A boundary is at most four characters, so only the held tail needs rescanning
        if FRAME_BOUNDARY.search(self._tail + chunk) is None:
            self._parts.append(chunk)
            self._tail = (self._tail + chunk)[-3:]
            return []

        *frames, rest = FRAME_BOUNDARY.split("".join(self._parts) + chunk)
        self._parts = [rest] if rest else []
        self._tail = rest[-3:]

        events: list[StreamEvent] = []
        for raw in frames:
            event = parse_frame(raw)
            if event is not None:
                events.append(event)
        return events


async def decode_stream(
    chunks: AsyncIterable[bytes],
    token: CancellationToken | None = None,
) -> AsyncGenerator[StreamEvent]:
    """Lazily decode a byte stream into events.

    Stops silently once the token is cancelled. A transport failure while
    reading is reported as a single ErrorEvent, after which decoding stops.
    Bytes of an unterminated trailing frame are discarded at end of stream.

    Args:
        chunks: Async iterable of raw response body chunks.
        token: Optional cancellation token checked after every read.

    Yields:
        Decoded stream events in arrival order.
    """
    decoder = FrameDecoder()

    def cancelled() -> bool:
        return token is not None and token.cancelled

    try:
        async for chunk in chunks:
            if cancelled():
                logger.debug("Stream cancelled, abandoning read loop")
                return
            for event in decoder.feed(chunk):
                if cancelled():
                    return
                yield event
    except (httpx.HTTPError, httpx.StreamError) as e:
        if cancelled():
            return
        logger.warning(f"Stream read failed: {e!r}")
        yield ErrorEvent(message=str(e) or type(e).__name__)
        return

    if decoder.pending.strip():
        logger.debug(f"Discarding unterminated trailing frame ({len(decoder.pending)} chars)")
