"""FastAPI reference answering service for the chat widget.

Speaks the widget's wire contract so the widget can run locally and be
tested end to end without external services.

Endpoints:
    - GET /health: Service health status
    - GET /api/v1/chatbot/info: Bot metadata (X-Api-Key)
    - POST /stream/ask-question: Server-sent answer stream
    - POST /api/v1/uploads: Multipart attachment upload
    - GET /api/v1/uploads/{file_id}: Uploaded file download
"""

from chat_widget.api.app import app, create_app

__all__ = ["app", "create_app"]
