"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: Frame decoding, chunking, cancellation, encoding
    - attachments/: Staging rules and previews
    - session/: Reducer state machine and notices
    - client/: Configuration and upload delegate

Uses httpx.MockTransport for remote collaborators.
"""
