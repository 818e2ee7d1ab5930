"""Unit tests for the session reducer state machine."""

import pytest_check as check

from chat_widget.models import Attachment, DeliveryStatus, Message, Sender
from chat_widget.session.reducer import ERROR_PLACEHOLDER, SessionReducer
from chat_widget.streaming import DeltaEvent, EndEvent, ErrorEvent, StartEvent


def bot_messages(reducer: SessionReducer) -> list[Message]:
    return [m for m in reducer.transcript if m.sender == Sender.BOT]


class TestSend:
    """Tests for user turns and upload settlement."""

    def test_send_without_attachments_is_sent(self) -> None:
        reducer = SessionReducer()
        reducer.input_text = "hi"

        message = reducer.send("hi")

        check.equal(message.status, DeliveryStatus.SENT)
        check.equal(message.sender, Sender.USER)
        check.equal(reducer.input_text, "")
        check.equal(reducer.transcript, (message,))

    def test_send_with_pending_upload_is_sending(self) -> None:
        reducer = SessionReducer()
        local = Attachment(name="a.png", url="local:a.png", mime="image/png", is_image=True)

        message = reducer.send("", [local], pending_upload=True)

        check.equal(message.status, DeliveryStatus.SENDING)
        check.equal(message.attachments, (local,))

    def test_upload_success_replaces_attachments(self) -> None:
        reducer = SessionReducer()
        message = reducer.send("see file", [Attachment(name="a", url="local:a")], pending_upload=True)
        uploaded = Attachment(name="a", url="https://cdn/a", size=3)

        reducer.upload_settled(message.id, [uploaded])

        settled = reducer.transcript[0]
        check.equal(settled.status, DeliveryStatus.SENT)
        check.equal(settled.attachments, (uploaded,))
        check.equal(settled.id, message.id)

    def test_upload_failure_marks_error(self) -> None:
        reducer = SessionReducer()
        message = reducer.send("x", [Attachment(name="a", url="local:a")], pending_upload=True)

        reducer.upload_settled(message.id, None)

        check.equal(reducer.transcript[0].status, DeliveryStatus.ERROR)
        check.is_none(reducer.open_correlation_id)


class TestStreamEvents:
    """Tests for applying stream events."""

    def test_hello_example(self) -> None:
        reducer = SessionReducer()
        reducer.send("hi")
        reducer.open_stream("corr-1")

        for event in [
            StartEvent(correlation_id="srv", model_name="m1"),
            DeltaEvent(text="He"),
            DeltaEvent(text="llo"),
            EndEvent(),
        ]:
            reducer.apply(event)

        user, bot = reducer.transcript
        check.equal((user.text, user.status), ("hi", DeliveryStatus.SENT))
        check.equal((bot.text, bot.status, bot.sender), ("Hello", DeliveryStatus.SENT, Sender.BOT))
        check.equal(bot.id, "corr-1")
        check.is_false(reducer.typing)
        check.is_none(reducer.open_message)
        check.equal(reducer.model_name, "m1")

    def test_start_sets_typing_without_transcript_change(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("c")
        reducer.typing = False

        reducer.apply(StartEvent())

        check.is_true(reducer.typing)
        check.equal(reducer.transcript, ())

    def test_first_delta_creates_message_and_clears_typing(self) -> None:
        created: list[Message] = []
        reducer = SessionReducer(on_bot_message=created.append)
        reducer.open_stream("c")

        reducer.apply(DeltaEvent(text="a"))
        reducer.apply(DeltaEvent(text="b"))

        check.is_false(reducer.typing)
        check.equal(len(created), 1)
        check.equal(reducer.open_message.text, "ab")

    def test_deltas_concatenate_in_order(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("c")
        pieces = ["The ", "quick ", "", "brown ", "fox"]

        for piece in pieces:
            reducer.apply(DeltaEvent(text=piece))

        assert reducer.open_message.text == "".join(pieces)

    def test_delta_without_open_stream_is_ignored(self) -> None:
        reducer = SessionReducer()

        reducer.apply(DeltaEvent(text="orphan"))

        assert reducer.transcript == ()

    def test_delta_after_end_does_not_mutate(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("c")
        reducer.apply(DeltaEvent(text="done"))
        reducer.apply(EndEvent())

        reducer.apply(DeltaEvent(text=" late"))

        assert bot_messages(reducer)[0].text == "done"

    def test_error_after_delta_keeps_text(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("c")
        reducer.apply(DeltaEvent(text="partial"))

        notice = reducer.apply(ErrorEvent(message="boom"))

        bot = bot_messages(reducer)[0]
        check.equal(notice, "boom")
        check.equal(bot.text, "partial")
        check.equal(bot.status, DeliveryStatus.ERROR)
        check.is_false(reducer.typing)
        check.is_none(reducer.open_correlation_id)

    def test_error_before_delta_synthesizes_bot_message(self) -> None:
        reducer = SessionReducer()
        reducer.send("q")
        reducer.open_stream("c")

        reducer.apply(ErrorEvent(message="Stream failed: 500 Internal Server Error"))

        bot = bot_messages(reducer)[0]
        check.equal(bot.id, "c")
        check.equal(bot.text, ERROR_PLACEHOLDER)
        check.equal(bot.status, DeliveryStatus.ERROR)

    def test_end_after_error_is_harmless(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("c")
        reducer.apply(ErrorEvent(message="x"))

        reducer.apply(EndEvent())

        check.equal(len(reducer.transcript), 1)
        check.is_false(reducer.typing)

    def test_finish_for_other_correlation_is_ignored(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("new")

        reducer.finish("old")

        check.equal(reducer.open_correlation_id, "new")
        check.is_true(reducer.typing)

    def test_at_most_one_open_bot_message(self) -> None:
        reducer = SessionReducer()
        reducer.open_stream("first")
        reducer.apply(DeltaEvent(text="one"))
        reducer.finish("first")
        reducer.open_stream("second")
        reducer.apply(DeltaEvent(text="two"))

        check.equal(reducer.open_message.id, "second")
        check.equal([m.text for m in bot_messages(reducer)], ["one", "two"])
