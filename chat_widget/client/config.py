"""Widget configuration with environment variable loading.

Pydantic-based configuration for one chat widget instance.
Values default from the environment (and a .env file when present).
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_ACCEPT = "image/*,.pdf,.doc,.docx,.txt,.md,.csv,.xls,.xlsx,.ppt,.pptx,.json"


class WidgetConfig(BaseModel):
    """Configuration for the chat widget.

    Attributes:
        api_key: Credential forwarded as the X-Api-Key header.
        config_url: Bot configuration endpoint.
        stream_url: Streaming answer endpoint.
        upload_url: Upload endpoint (None selects local-only attachments).
        max_files: Cap on files per selection and on files staged at once.
        max_file_size_mb: Per-file size limit in megabytes.
        accept: Accept string for the file picker.
        notice_seconds: How long ephemeral notices stay visible.
        connect_timeout: Connection timeout in seconds. Reads never time out.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("CHAT_API_KEY", ""),
        validate_default=True,
        description="Credential forwarded to the chat services",
    )
    config_url: str = Field(
        default_factory=lambda: os.getenv(
            "CHAT_CONFIG_URL", "http://localhost:8000/api/v1/chatbot/info"
        ),
        description="Bot configuration endpoint",
    )
    stream_url: str = Field(
        default_factory=lambda: os.getenv(
            "CHAT_STREAM_URL", "http://localhost:8000/stream/ask-question"
        ),
        description="Streaming answer endpoint",
    )
    upload_url: str | None = Field(
        default_factory=lambda: os.getenv("CHAT_UPLOAD_URL") or None,
        validate_default=True,
        description="Upload endpoint (None for local-only attachments)",
    )
    max_files: int = Field(
        default_factory=lambda: int(os.getenv("CHAT_MAX_FILES", "5")),
        ge=1,
        le=100,
        description="Maximum files per selection and staged at once",
    )
    max_file_size_mb: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_MAX_FILE_SIZE_MB", "10")),
        gt=0,
        description="Maximum size of a single file in megabytes",
    )
    accept: str = Field(default=DEFAULT_ACCEPT, description="File picker accept string")
    notice_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Display window for ephemeral notices",
    )
    connect_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Connection timeout in seconds",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that an API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set CHAT_API_KEY in .env")
        return v.strip()

    @field_validator("upload_url")
    @classmethod
    def blank_upload_url_is_none(cls, v: str | None) -> str | None:
        """Treat an empty upload URL as no upload destination."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def max_file_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def auth_headers(self) -> dict[str, str]:
        return {"X-Api-Key": self.api_key}


def get_widget_config() -> WidgetConfig:
    """Create widget configuration from environment.

    Returns:
        Configured WidgetConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return WidgetConfig()
