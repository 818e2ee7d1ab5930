"""Unit tests for ephemeral notices."""

import asyncio

import pytest
import pytest_check as check

from chat_widget.session.notices import NoticeBoard


class TestNoticeBoard:
    """Tests for auto-clearing notices."""

    async def test_notice_clears_after_window(self) -> None:
        board = NoticeBoard(display_seconds=0.02)

        board.post("Upload failed")
        check.equal(board.current, "Upload failed")

        await asyncio.sleep(0.05)
        check.is_none(board.current)

    async def test_new_notice_restarts_window(self) -> None:
        board = NoticeBoard(display_seconds=0.05)

        board.post("first")
        await asyncio.sleep(0.03)
        board.post("second")
        await asyncio.sleep(0.03)

        check.equal(board.current, "second")
        await asyncio.sleep(0.05)
        check.is_none(board.current)

    async def test_clear_cancels_pending_expiry(self) -> None:
        changes: list[str | None] = []
        board = NoticeBoard(display_seconds=0.02)
        board._on_change = lambda: changes.append(board.current)

        board.post("x")
        board.clear()
        await asyncio.sleep(0.04)

        assert changes == ["x", None]

    def test_post_requires_running_loop(self) -> None:
        with pytest.raises(RuntimeError):
            NoticeBoard().post("no loop")
