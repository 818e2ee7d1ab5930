"""FastAPI application for the reference answering service."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_widget.api.chat import router as chat_router
from chat_widget.api.uploads import router as uploads_router

# Pages allowed to embed the widget, comma separated
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CHAT_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]


def create_app() -> FastAPI:
    """Build the reference service the widget talks to.

    Embedding pages call it cross-origin, so CORS admits the widget's
    methods and its X-Api-Key header.

    Returns:
        FastAPI application with the chat and upload routers.
    """
    application = FastAPI(
        title="Chat Widget Reference Service",
        description="Bot metadata, streamed answers and attachment uploads for the chat widget.",
        version="0.1.0",
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Accept", "X-Api-Key"],
    )
    application.include_router(chat_router)
    application.include_router(uploads_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "chat-widget"}

    return application


app = create_app()
