"""Typed events decoded from the answer stream.

StreamEvent is a closed union: StartEvent | DeltaEvent | ErrorEvent | EndEvent.
Each variant knows its wire payload so the same models serve the decoder and
the reference server's encoder.
"""

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class _WireEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON payload carried on the event's data lines."""
        return self.model_dump(mode="json", by_alias=True, exclude={"type"})


class StartEvent(_WireEvent):
    """Stream opened. Informational only."""

    type: Literal["start"] = "start"
    correlation_id: str = Field(default="", alias="id")
    model_name: str = Field(default="", alias="model")
    created_at: int | float | str | None = Field(default=None, alias="createdAt")


class DeltaEvent(_WireEvent):
    """An incremental fragment of the bot reply."""

    type: Literal["delta"] = "delta"
    text: str = Field(default="", alias="content")


class ErrorEvent(_WireEvent):
    """Server-reported or synthetic stream failure."""

    type: Literal["error"] = "error"
    message: str = "Unknown error"


class EndEvent(_WireEvent):
    """Stream finished normally."""

    type: Literal["end"] = "end"


StreamEvent = StartEvent | DeltaEvent | ErrorEvent | EndEvent

_EVENT_TYPES: dict[str, type[_WireEvent]] = {
    "start": StartEvent,
    "delta": DeltaEvent,
    "error": ErrorEvent,
    "end": EndEvent,
}


def event_from_payload(event_type: str, payload: dict[str, Any]) -> StreamEvent | None:
    """Build the event for a frame's type and parsed payload.

    Unknown event types return None so newer servers can add events
    without breaking older widgets. A payload whose fields have the wrong
    shape is treated like an empty payload.
    """
    event_cls = _EVENT_TYPES.get(event_type)
    if event_cls is None:
        logger.debug(f"Ignoring unrecognized stream event type: {event_type!r}")
        return None

    try:
        return event_cls.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Malformed {event_type} payload, using defaults: {e}")
        return event_cls()


def encode_event(event: StreamEvent) -> str:
    """Encode an event as one wire frame, terminated by a blank line."""
    data = json.dumps(event.to_payload(), separators=(",", ":"), ensure_ascii=False)
    return f"event: {event.type}\ndata: {data}\n\n"
