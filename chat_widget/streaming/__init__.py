"""Answer stream protocol: typed events, incremental decoding, encoding.

Responsibilities:
    - StreamEvent closed union (start, delta, error, end)
    - Frame splitting across arbitrary chunk boundaries
    - Per-frame error isolation and silent cancellation
    - Wire encoding for the reference answering service
"""

from chat_widget.streaming.cancellation import CancellationToken
from chat_widget.streaming.decoder import FrameDecoder, decode_stream, parse_frame
from chat_widget.streaming.events import (
    DeltaEvent,
    EndEvent,
    ErrorEvent,
    StartEvent,
    StreamEvent,
    encode_event,
    event_from_payload,
)

__all__ = [
    "CancellationToken",
    "DeltaEvent",
    "EndEvent",
    "ErrorEvent",
    "FrameDecoder",
    "StartEvent",
    "StreamEvent",
    "decode_stream",
    "encode_event",
    "event_from_payload",
    "parse_frame",
]
