"""Test package for the chat widget.

Structure:
    - unit/: Decoder, intake, reducer, notices and client tests in isolation
    - integration/: Sessions driven against the reference service and scripted streams

No network access is needed: HTTP goes through httpx ASGITransport or MockTransport.
Leverages pytest with pytest-check for soft assertions.
"""
