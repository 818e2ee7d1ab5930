"""Chat session state and lifecycle.

Responsibilities:
    - Transcript, typing flag and open bot message (SessionReducer)
    - Ephemeral notices with a fixed display window (NoticeBoard)
    - At-most-one in-flight request, cancellation and teardown (ChatSession)
"""

from chat_widget.session.lifecycle import NO_TEXT_QUESTION, ChatSession, SessionRequest
from chat_widget.session.notices import NoticeBoard
from chat_widget.session.reducer import OpenMessageHandle, SessionReducer

__all__ = [
    "NO_TEXT_QUESTION",
    "ChatSession",
    "NoticeBoard",
    "OpenMessageHandle",
    "SessionReducer",
    "SessionRequest",
]
