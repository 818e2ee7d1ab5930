"""Integration tests for components working together as a system.

Coverage:
    - Reference service endpoints over ASGITransport
    - Full chat turns from send to finalized transcript
    - Cancellation, supersede and teardown with scripted streams
    - Upload then stream workflows
"""
