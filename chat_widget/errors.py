"""Error taxonomy for the chat widget.

Fatal errors (AuthError, ConfigError) replace the whole widget with an error
affordance. Everything else is local to one turn and the user may retry.
"""


class ChatWidgetError(Exception):
    """Base class for all chat widget errors."""

    pass


class AuthError(ChatWidgetError):
    """Raised when the configuration endpoint rejects the credential."""

    pass


class ConfigError(ChatWidgetError):
    """Raised when bot configuration cannot be loaded for any non-auth reason."""

    pass


class UploadError(ChatWidgetError):
    """Raised when staged files cannot be turned into attachments."""

    pass


class StreamTransportError(ChatWidgetError):
    """Raised when the answer stream cannot be opened or read."""

    pass


class ProtocolFrameError(ChatWidgetError):
    """Raised for a single malformed stream frame. Never surfaced to the user."""

    pass


class AttachmentValidationError(ChatWidgetError):
    """Raised when staged files violate the count or size caps."""

    pass
