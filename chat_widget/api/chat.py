"""Bot metadata and streaming answer endpoints.

Answers are a word-by-word echo of the question, framed with the same
encoder the widget's decoder is tested against.
"""

import asyncio
import logging
import os
import time
import uuid
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Header, HTTPException, status
from fastapi.responses import StreamingResponse

from chat_widget.models.schemas import AskRequest, BotConfig
from chat_widget.streaming.events import DeltaEvent, EndEvent, StartEvent, encode_event

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

DEMO_API_KEY = os.getenv("CHAT_DEMO_API_KEY", "demo-key")
DEMO_MODEL = "echo-1"

# Pause between deltas so the demo visibly streams (0 in tests)
DELTA_DELAY = float(os.getenv("CHAT_DEMO_DELTA_DELAY", "0"))

DEMO_BOT = BotConfig(
    uuid="00000000-0000-4000-8000-000000000001", name="Echo Bot", themeColor="#4f46e5"
)


def compose_answer(question: str) -> list[str]:
    """Split the echo answer into deltas, one word (with its spacing) each."""
    words = f"You asked: {question}".split(" ")
    return [word if i == 0 else f" {word}" for i, word in enumerate(words)]


@router.get("/api/v1/chatbot/info")
async def chatbot_info(x_api_key: str | None = Header(default=None)) -> dict[str, dict[str, str]]:
    """Return bot metadata for a valid credential.

    Raises:
        401: Missing or unknown API key.
    """
    if x_api_key != DEMO_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized or invalid API key",
        )
    return {"result": DEMO_BOT.model_dump(by_alias=True)}


async def _answer_frames(question: str) -> AsyncGenerator[str]:
    yield encode_event(
        StartEvent(
            correlation_id=uuid.uuid4().hex, model_name=DEMO_MODEL, created_at=int(time.time())
        )
    )
    for piece in compose_answer(question):
        if DELTA_DELAY:
            await asyncio.sleep(DELTA_DELAY)
        yield encode_event(DeltaEvent(text=piece))
    yield encode_event(EndEvent())


@router.post("/stream/ask-question")
async def ask_question(request: AskRequest) -> StreamingResponse:
    """Stream an answer to the question as server-sent events.

    Args:
        request: Validated question payload.

    Returns:
        text/event-stream response with start, delta and end frames.
    """
    logger.info(f"Answering question ({len(request.user_question)} chars)")
    return StreamingResponse(
        _answer_frames(request.user_question),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
