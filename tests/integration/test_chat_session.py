"""Integration tests for full chat turns against the reference service.

No mocks for the happy path: the session talks to the actual FastAPI app
through ASGITransport.
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_check as check
from httpx import AsyncClient

from chat_widget.attachments import StagedFile
from chat_widget.client.config import WidgetConfig
from chat_widget.models import DeliveryStatus, Sender
from chat_widget.session import ChatSession


@pytest.fixture
async def session(widget_config: WidgetConfig, async_client: AsyncClient) -> AsyncGenerator[ChatSession]:
    chat = ChatSession(widget_config, client=async_client)
    yield chat
    await chat.dispose()


class TestLoad:
    """Tests for bot configuration loading."""

    async def test_load_succeeds_with_valid_key(self, session: ChatSession) -> None:
        config = await session.load()

        check.is_not_none(config)
        check.equal(config.display_name, "Echo Bot")
        check.is_none(session.fatal_error)

    async def test_bad_key_is_fatal(
        self, widget_config: WidgetConfig, async_client: AsyncClient
    ) -> None:
        config = widget_config.model_copy(update={"api_key": "wrong"})
        chat = ChatSession(config, client=async_client)

        result = await chat.load()

        check.is_none(result)
        check.equal(chat.fatal_error, "Unauthorized or invalid API key")
        await chat.dispose()

    async def test_missing_endpoint_is_config_error(
        self, widget_config: WidgetConfig, async_client: AsyncClient
    ) -> None:
        config = widget_config.model_copy(update={"config_url": "http://test/missing"})
        chat = ChatSession(config, client=async_client)

        await chat.load()

        check.is_in("Failed to load chatbot config", chat.fatal_error)
        await chat.dispose()


class TestTurns:
    """Tests for send through stream completion."""

    async def test_text_turn(self, session: ChatSession) -> None:
        await session.send("hi")

        user, bot = session.transcript
        check.equal((user.sender, user.text, user.status), (Sender.USER, "hi", DeliveryStatus.SENT))
        check.equal(
            (bot.sender, bot.text, bot.status),
            (Sender.BOT, "You asked: hi", DeliveryStatus.SENT),
        )
        check.is_false(session.typing)
        check.is_none(session.current_request)

    async def test_send_uses_composer_text(self, session: ChatSession) -> None:
        session.input_text = "  from composer  "

        await session.send()

        check.equal(session.transcript[0].text, "from composer")
        check.equal(session.input_text, "")

    async def test_empty_send_is_noop(self, session: ChatSession) -> None:
        await session.send("   ")

        assert session.transcript == ()

    async def test_consecutive_turns_keep_order(self, session: ChatSession) -> None:
        await session.send("one")
        await session.send("two")

        texts = [m.text for m in session.transcript]
        assert texts == ["one", "You asked: one", "two", "You asked: two"]

    async def test_attachments_only_turn_uses_placeholder_question(
        self, session: ChatSession
    ) -> None:
        session.add_files([StagedFile.from_bytes("notes.txt", b"hello")])

        await session.send()

        user, bot = session.transcript
        check.equal(user.text, "")
        check.equal(user.attachments[0].url, "local:notes.txt")
        check.equal(bot.text, "You asked: (no text)")
        check.equal(session.staged_files, ())

    async def test_remote_upload_then_stream(
        self, widget_config: WidgetConfig, async_client: AsyncClient, png_bytes: bytes
    ) -> None:
        config = widget_config.model_copy(update={"upload_url": "http://test/api/v1/uploads"})
        chat = ChatSession(config, client=async_client)
        chat.add_files(
            [StagedFile.from_bytes("photo.png", png_bytes), StagedFile.from_bytes("a.txt", b"abc")]
        )

        await chat.send("look")

        user = chat.transcript[0]
        check.equal(user.status, DeliveryStatus.SENT)
        check.equal([a.name for a in user.attachments], ["photo.png", "a.txt"])
        check.equal([a.is_image for a in user.attachments], [True, False])
        check.is_true(all(a.url.startswith("http://test/api/v1/uploads/") for a in user.attachments))
        check.equal(chat.transcript[1].text, "You asked: look")
        await chat.dispose()


class TestUploadFailure:
    """An upload failure marks the user message and opens no stream."""

    async def test_failed_upload_stops_turn(self, widget_config: WidgetConfig) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(503)

        config = widget_config.model_copy(update={"upload_url": "http://test/api/v1/uploads"})
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            chat = ChatSession(config, client=client)
            chat.add_files([StagedFile.from_bytes("a.txt", b"abc")])

            await chat.send("with file")

            (user,) = chat.transcript
            check.equal(user.status, DeliveryStatus.ERROR)
            check.equal(requested, ["/api/v1/uploads"])
            check.equal(chat.notices.current, "Upload failed")
            check.equal(len(chat.staged_files), 1)
            await chat.dispose()


class TestAttachmentNotices:
    """Intake violations surface as ephemeral notices only."""

    async def test_selection_cap_notice(self, session: ChatSession, wait_for) -> None:
        result = session.add_files(
            [StagedFile.from_bytes(f"f{i}.txt", b"x") for i in range(6)]
        )

        check.is_true(result.rejected)
        check.is_in("up to 5 files per selection", session.notices.current)
        check.equal(session.staged_files, ())
        check.equal(session.transcript, ())

        await wait_for(lambda: session.notices.current is None)

    async def test_remove_file(self, session: ChatSession) -> None:
        session.add_files([StagedFile.from_bytes(f"f{i}.txt", b"x") for i in range(3)])

        session.remove_file(0)
        session.remove_file(10)

        assert [f.name for f in session.staged_files] == ["f1.txt", "f2.txt"]


class TestUnreadBadge:
    """Bot replies while the panel is hidden count as unread."""

    async def test_hidden_panel_counts_reply(
        self, widget_config: WidgetConfig, async_client: AsyncClient
    ) -> None:
        calls: list[None] = []
        chat = ChatSession(
            widget_config, client=async_client, on_bot_reply_while_hidden=lambda: calls.append(None)
        )

        await chat.send("hi")

        check.equal(chat.unread_count, 1)
        check.equal(len(calls), 1)

        chat.open_panel()
        check.equal(chat.unread_count, 0)

        await chat.send("again")
        check.equal(chat.unread_count, 0)
        check.equal(len(calls), 1)
        await chat.dispose()

    async def test_listeners_are_notified(self, session: ChatSession) -> None:
        changes: list[int] = []
        unsubscribe = session.subscribe(lambda: changes.append(len(session.transcript)))

        await session.send("hi")
        unsubscribe()
        count = len(changes)
        session.open_panel()

        check.greater(count, 0)
        check.equal(changes[-1], 2)
        check.equal(len(changes), count)
