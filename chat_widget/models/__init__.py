"""Pydantic models for the chat widget and its wire contract.

Provides type safety and validation for transcript state and remote payloads.

Models:
    - Attachment: File reference carried by a message
    - Message: One transcript entry (user or bot)
    - BotConfig: Bot metadata from the configuration endpoint
    - AskRequest: Streaming answer request payload
    - UploadedFile: Upload endpoint response entry
"""

from chat_widget.models.schemas import (
    AskRequest,
    Attachment,
    BotConfig,
    DeliveryStatus,
    Message,
    Sender,
    UploadedFile,
)

__all__ = [
    "AskRequest",
    "Attachment",
    "BotConfig",
    "DeliveryStatus",
    "Message",
    "Sender",
    "UploadedFile",
]
