"""NiceGUI interface - thin visualization layer for the chat widget.

Responsibilities:
    - Floating action button with unread badge
    - Chat panel showing the transcript with streaming updates
    - Staged file chips with previews and ephemeral notices

Contains no business logic. Observes a ChatSession and forwards user actions.
"""
