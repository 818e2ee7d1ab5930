"""Chat Widget - streaming chat session controller for an embeddable widget.

Combines httpx for streaming requests, Pydantic for data validation,
Pillow for attachment previews, FastAPI for a reference answering service
and NiceGUI for visualization.

Components:
    - streaming: Server-sent event decoding into typed events
    - session: Transcript reducer and request lifecycle
    - attachments: File staging, validation and previews
    - client: Bot config, upload and answer stream clients
    - api: Reference answering service
    - ui: Web interface for the widget
    - models: Transcript and wire schemas
"""

__version__ = "0.1.0"
