"""Session reducer: the transcript state machine.

Owns the transcript, the typing flag and the open bot message. All
mutations go through the action methods below. Messages are frozen models;
an in-place update replaces the entry at the same position, so insertion
order is never disturbed.

Only one bot message can be open at a time. Which stream is allowed to
reach the reducer is decided by the session lifecycle, not here.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from chat_widget.models.schemas import Attachment, DeliveryStatus, Message, Sender
from chat_widget.streaming.events import (
    DeltaEvent,
    EndEvent,
    ErrorEvent,
    StartEvent,
    StreamEvent,
)

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER = "[Error]"


@dataclass
class OpenMessageHandle:
    """Pointer to the bot message receiving deltas for one stream.

    Attributes:
        correlation_id: Id of the stream, reused as the bot message id.
        index: Transcript position of the bot message, None until the first delta.
    """

    correlation_id: str
    index: int | None = None


class SessionReducer:
    """Apply user actions and stream events to the conversation transcript.

    Args:
        on_bot_message: Called once for every bot message created by a delta.
    """

    def __init__(self, on_bot_message: Callable[[Message], None] | None = None) -> None:
        self._messages: list[Message] = []
        self._open: OpenMessageHandle | None = None
        self._on_bot_message = on_bot_message
        self.typing = False
        self.input_text = ""
        self.model_name: str | None = None

    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def open_correlation_id(self) -> str | None:
        return self._open.correlation_id if self._open else None

    @property
    def open_message(self) -> Message | None:
        """The bot message currently receiving deltas, if any."""
        if self._open is None or self._open.index is None:
            return None
        return self._messages[self._open.index]

    def send(
        self, text: str, attachments: Sequence[Attachment] = (), pending_upload: bool = False
    ) -> Message:
        """Append a user message and clear the composer."""
        message = Message(
            id=uuid.uuid4().hex,
            sender=Sender.USER,
            text=text,
            status=DeliveryStatus.SENDING if pending_upload else DeliveryStatus.SENT,
            attachments=tuple(attachments),
        )
        self._messages.append(message)
        self.input_text = ""
        return message

    def upload_settled(self, message_id: str, attachments: Sequence[Attachment] | None) -> None:
        """Record the upload outcome on a user message.

        Args:
            message_id: Id of the user message.
            attachments: Delivered attachments, or None if the upload failed.
        """
        for index, message in enumerate(self._messages):
            if message.id != message_id:
                continue
            if attachments is None:
                self._messages[index] = message.model_copy(update={"status": DeliveryStatus.ERROR})
            else:
                self._messages[index] = message.model_copy(
                    update={"status": DeliveryStatus.SENT, "attachments": tuple(attachments)}
                )
            return
        logger.debug(f"Upload settled for unknown message {message_id}")

    def open_stream(self, correlation_id: str) -> None:
        """Start awaiting a reply for a new correlation id."""
        self._open = OpenMessageHandle(correlation_id)
        self.typing = True

    def apply(self, event: StreamEvent) -> str | None:
        """Apply one stream event.

        Returns:
            The error text to surface as a notice for error events, else None.
        """
        match event:
            case StartEvent():
                self.typing = True
                self.model_name = event.model_name or self.model_name
            case DeltaEvent():
                self._append_delta(event.text)
            case ErrorEvent():
                self._fail(event.message)
                return event.message
            case EndEvent():
                self.finish()
            case _:
                logger.debug(f"Ignoring unsupported event {event!r}")
        return None

    def finish(self, correlation_id: str | None = None) -> None:
        """Close the open stream, leaving any bot message text as it is.

        Args:
            correlation_id: Only finish if this stream is the open one.
        """
        if correlation_id is not None and correlation_id != self.open_correlation_id:
            return
        self._open = None
        self.typing = False

    def _append_delta(self, text: str) -> None:
        handle = self._open
        if handle is None:
            logger.debug("Delta received with no open stream, ignoring")
            return

        if handle.index is None:
            message = Message(id=handle.correlation_id, sender=Sender.BOT, text=text)
            self._messages.append(message)
            handle.index = len(self._messages) - 1
            self.typing = False
            if self._on_bot_message is not None:
                self._on_bot_message(message)
            return

        current = self._messages[handle.index]
        self._messages[handle.index] = current.model_copy(update={"text": current.text + text})

    def _fail(self, reason: str) -> None:
        handle = self._open
        if handle is not None:
            if handle.index is not None:
                current = self._messages[handle.index]
                self._messages[handle.index] = current.model_copy(
                    update={"status": DeliveryStatus.ERROR}
                )
            else:
                self._messages.append(
                    Message(
                        id=handle.correlation_id,
                        sender=Sender.BOT,
                        text=ERROR_PLACEHOLDER,
                        status=DeliveryStatus.ERROR,
                    )
                )
        logger.info(f"Stream error: {reason}")
        self.finish()
