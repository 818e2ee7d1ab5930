"""HTTP collaborators of the chat widget, built on httpx.

Endpoints consumed:
    - GET config_url: Bot metadata (X-Api-Key)
    - POST stream_url: Server-sent answer stream
    - POST upload_url: Multipart attachment upload (optional)
"""

from chat_widget.client.answers import stream_answer
from chat_widget.client.bot_config import fetch_bot_config
from chat_widget.client.config import WidgetConfig, get_widget_config
from chat_widget.client.upload import UploadDelegate

__all__ = [
    "UploadDelegate",
    "WidgetConfig",
    "fetch_bot_config",
    "get_widget_config",
    "stream_answer",
]
