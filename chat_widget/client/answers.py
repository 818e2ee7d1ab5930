"""Client for the streaming answer endpoint."""

import logging
from collections.abc import AsyncGenerator

import httpx

from chat_widget.errors import StreamTransportError
from chat_widget.models.schemas import AskRequest
from chat_widget.streaming.cancellation import CancellationToken
from chat_widget.streaming.decoder import decode_stream
from chat_widget.streaming.events import ErrorEvent, StreamEvent

logger = logging.getLogger(__name__)


async def stream_answer(
    client: httpx.AsyncClient,
    url: str,
    question: str,
    token: CancellationToken,
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[StreamEvent]:
    """Ask a question and yield the decoded answer events.

    Failures to open the stream are reported as a single ErrorEvent, the
    same way read failures are. Nothing is yielded after cancellation.

    Args:
        client: HTTP client to use.
        url: Streaming answer endpoint.
        question: The user's question.
        token: Cancellation token for this request.
        headers: Extra request headers (e.g. the credential).

    Yields:
        Stream events in arrival order.
    """
    body = AskRequest(user_question=question).model_dump()

    try:
        async with client.stream(
            "POST",
            url,
            json=body,
            headers={"Accept": "text/event-stream", **(headers or {})},
        ) as response:
            if response.is_error:
                raise StreamTransportError(
                    f"Stream failed: {response.status_code} {response.reason_phrase}"
                )
            async for event in decode_stream(response.aiter_bytes(), token):
                yield event
    except StreamTransportError as e:
        logger.warning(str(e))
        yield ErrorEvent(message=str(e))
    except httpx.RequestError as e:
        if token.cancelled:
            return
        logger.warning(f"Connection failed: {e!r}")
        yield ErrorEvent(message=f"Connection failed: {e}")
