"""Ephemeral, auto-clearing user notices."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class NoticeBoard:
    """Holds at most one notice and clears it after a display window.

    A new notice replaces the current one and restarts the window.
    Posting requires a running event loop.
    """

    def __init__(
        self,
        display_seconds: float = 3.0,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.display_seconds = display_seconds
        self.current: str | None = None
        self._on_change = on_change
        self._timer: asyncio.TimerHandle | None = None

    def post(self, text: str) -> None:
        self._cancel_timer()
        self.current = text
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.display_seconds, self._expire)
        logger.debug(f"Notice posted: {text}")
        self._changed()

    def clear(self) -> None:
        self._cancel_timer()
        if self.current is not None:
            self.current = None
            self._changed()

    def _expire(self) -> None:
        self._timer = None
        self.current = None
        self._changed()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
