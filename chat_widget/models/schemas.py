from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sender(str, Enum):
    """Author of a transcript message."""

    USER = "user"
    BOT = "bot"


class DeliveryStatus(str, Enum):
    """Delivery state of a transcript message."""

    SENDING = "sending"
    SENT = "sent"
    ERROR = "error"


class Attachment(BaseModel):
    """A file reference carried by a message.

    Attributes:
        name: Original filename.
        url: Locator for the file (remote URL or local preview reference).
        mime: MIME type reported for the file.
        size: Size in bytes.
        is_image: Whether the file renders as an image.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    mime: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    is_image: bool = False


class Message(BaseModel):
    """One entry of the conversation transcript.

    Attributes:
        id: Opaque unique token. For bot messages this is the stream's correlation id.
        sender: Who wrote the message.
        text: Message body. Grows in place only while a bot message is open.
        created_at: Creation timestamp.
        status: Delivery status.
        attachments: Files attached to the message.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sender: Sender
    text: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    status: DeliveryStatus = DeliveryStatus.SENT
    attachments: tuple[Attachment, ...] = ()


class BotConfig(BaseModel):
    """Bot metadata served by the configuration endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    display_name: str = Field(alias="name")
    theme_color: str = Field(default="#4f46e5", alias="themeColor")


class AskRequest(BaseModel):
    """Request payload for the streaming answer endpoint.

    Attributes:
        user_question: The user's question.
    """

    user_question: str = Field(..., min_length=1)

    @field_validator("user_question", mode="before")
    @classmethod
    def strip_question(cls, v: str) -> str:
        """Strip whitespace from the question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class UploadedFile(BaseModel):
    """One entry of the upload endpoint's response array."""

    name: str
    url: str
    mime: str | None = None
    size: int = Field(default=0, ge=0)
