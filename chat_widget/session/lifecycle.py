"""Chat session: one widget instance's state and request lifecycle.

Enforces at most one live request per session:
    - A new send cancels the in-flight turn before issuing its own request
    - Closing the panel or disposing the session cancels the in-flight turn
    - A cancelled stream is abandoned silently, never reported as an error

Events from a superseded request are dropped before they reach the reducer.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import httpx

from chat_widget.attachments.intake import StagedFile, StageResult, StagingArea
from chat_widget.client.answers import stream_answer
from chat_widget.client.bot_config import fetch_bot_config
from chat_widget.client.config import WidgetConfig
from chat_widget.client.upload import UploadDelegate
from chat_widget.errors import AuthError, ConfigError, UploadError
from chat_widget.models.schemas import BotConfig, Message
from chat_widget.session.notices import NoticeBoard
from chat_widget.session.reducer import SessionReducer
from chat_widget.streaming.cancellation import CancellationToken
from chat_widget.streaming.events import StreamEvent

logger = logging.getLogger(__name__)

# Question sent when a turn carries only attachments
NO_TEXT_QUESTION = "(no text)"


@dataclass
class SessionRequest:
    """The single in-flight turn of a session."""

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    token: CancellationToken = field(default_factory=CancellationToken)
    task: asyncio.Task[None] | None = None


class ChatSession:
    """Streaming chat session controller for one widget instance.

    Args:
        config: Widget configuration.
        client: Optional HTTP client. A client is created (and owned) when omitted.
        on_bot_reply_while_hidden: Called when a bot message arrives while the panel is closed.
    """

    def __init__(
        self,
        config: WidgetConfig,
        *,
        client: httpx.AsyncClient | None = None,
        on_bot_reply_while_hidden: Callable[[], None] | None = None,
    ) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=config.connect_timeout)
        )
        self._on_bot_reply_while_hidden = on_bot_reply_while_hidden
        self._listeners: list[Callable[[], None]] = []
        self._request: SessionRequest | None = None
        self._disposed = False

        self.reducer = SessionReducer(on_bot_message=self._bot_message_created)
        self.notices = NoticeBoard(config.notice_seconds, on_change=self._notify)
        self.staging = StagingArea(config.max_files, config.max_file_bytes)
        self.uploads = UploadDelegate(self._client, config.upload_url, config.auth_headers)

        self.bot_config: BotConfig | None = None
        self.fatal_error: str | None = None
        self.panel_visible = False
        self.unread_count = 0

    async def __aenter__(self) -> "ChatSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # === Observed state ===

    @property
    def transcript(self) -> tuple[Message, ...]:
        return self.reducer.transcript

    @property
    def typing(self) -> bool:
        return self.reducer.typing

    @property
    def input_text(self) -> str:
        return self.reducer.input_text

    @input_text.setter
    def input_text(self, value: str) -> None:
        self.reducer.input_text = value

    @property
    def staged_files(self) -> tuple[StagedFile, ...]:
        return self.staging.files

    @property
    def current_request(self) -> SessionRequest | None:
        return self._request

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # === Configuration ===

    async def load(self) -> BotConfig | None:
        """Fetch the bot configuration.

        Auth and config failures are fatal for the widget: they are recorded
        on fatal_error instead of being raised.
        """
        try:
            self.bot_config = await fetch_bot_config(
                self._client, self.config.config_url, self.config.api_key
            )
            self.fatal_error = None
        except (AuthError, ConfigError) as e:
            logger.error(f"Chat widget disabled: {e}")
            self.bot_config = None
            self.fatal_error = str(e)
        self._notify()
        return self.bot_config

    # === Attachments ===

    def add_files(self, files: Sequence[StagedFile]) -> StageResult:
        """Offer a selection of files for staging, posting any notice."""
        result = self.staging.add(list(files))
        if result.rejection_reason:
            self.notices.post(result.rejection_reason)
        self._notify()
        return result

    def remove_file(self, index: int) -> None:
        self.staging.remove(index)
        self._notify()

    # === Panel ===

    def open_panel(self) -> None:
        self.panel_visible = True
        self.unread_count = 0
        self._notify()

    def close_panel(self) -> None:
        self.panel_visible = False
        self.cancel()
        self._notify()

    # === Turns ===

    async def send(self, text: str | None = None) -> None:
        """Send one user turn and stream the reply into the transcript.

        Uses the composer text when no text is given. Returns once the turn
        finishes, fails, or is cancelled (by a newer send, the panel closing,
        or disposal).
        """
        if self._disposed:
            logger.warning("send() called on a disposed session")
            return

        clean = (self.reducer.input_text if text is None else text).strip()
        files = self.staging.files
        if not clean and not files:
            return

        self.cancel()

        request = SessionRequest()
        user_message = self.reducer.send(
            clean,
            [f.to_attachment() for f in files],
            pending_upload=bool(files),
        )
        self._request = request
        request.task = asyncio.create_task(
            self._run_turn(request, user_message, files, clean or NO_TEXT_QUESTION)
        )
        self._notify()

        try:
            await request.task
        except asyncio.CancelledError:
            if not request.token.cancelled:
                raise
            logger.debug(f"Turn {request.correlation_id} cancelled")
        finally:
            if self._request is request:
                self._request = None

    def apply(self, request: SessionRequest, event: StreamEvent) -> None:
        """Apply an event produced for a request, unless it was superseded."""
        if request is not self._request or request.token.cancelled:
            logger.debug(f"Dropping {event.type} event for stale request {request.correlation_id}")
            return

        error = self.reducer.apply(event)
        if error is not None:
            self.notices.post(error)
        self._notify()

    def cancel(self) -> None:
        """Cancel the in-flight turn, if any.

        Partial bot text stays as it is and is not marked as an error.
        """
        request = self._request
        if request is None:
            return

        self._request = None
        request.token.cancel()
        if request.task is not None and not request.task.done():
            request.task.cancel()
        self.reducer.finish(request.correlation_id)
        logger.info(f"Cancelled turn {request.correlation_id}")
        self._notify()

    async def dispose(self) -> None:
        """Tear down the session. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True

        request = self._request
        self.cancel()
        if request is not None and request.task is not None:
            await asyncio.gather(request.task, return_exceptions=True)

        self.notices.clear()
        self._listeners.clear()
        if self._owns_client:
            await self._client.aclose()

    async def _run_turn(
        self,
        request: SessionRequest,
        user_message: Message,
        files: tuple[StagedFile, ...],
        question: str,
    ) -> None:
        if files:
            try:
                attachments = await self.uploads.deliver(files)
            except UploadError as e:
                self.reducer.upload_settled(user_message.id, None)
                self.notices.post(str(e) or "Failed to send message")
                return
            except asyncio.CancelledError:
                self.reducer.upload_settled(user_message.id, None)
                self._notify()
                raise

            self.reducer.upload_settled(user_message.id, attachments)
            self.staging.clear()

        self.reducer.open_stream(request.correlation_id)
        self._notify()

        try:
            async for event in stream_answer(
                self._client,
                self.config.stream_url,
                question,
                request.token,
                headers=self.config.auth_headers,
            ):
                self.apply(request, event)
        finally:
            # Stream completion without an end frame still closes the message
            self.reducer.finish(request.correlation_id)
            self._notify()

    def _bot_message_created(self, message: Message) -> None:
        if self.panel_visible:
            return
        self.unread_count += 1
        if self._on_bot_reply_while_hidden is not None:
            self._on_bot_reply_while_hidden()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
