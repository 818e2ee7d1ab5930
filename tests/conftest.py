"""Pytest fixtures and shared test configuration.

Fixtures:
    - widget_config: Valid WidgetConfig pointing at the reference service
    - async_client: HTTPX client bound to the reference service over ASGI
    - png_bytes: A small real PNG image
    - wait_for: Polls a condition while the event loop runs
"""

import asyncio
import io
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from chat_widget.api import app
from chat_widget.api.chat import DEMO_API_KEY
from chat_widget.client.config import WidgetConfig

BASE_URL = "http://test"


@pytest.fixture
def widget_config() -> WidgetConfig:
    """Return a config aimed at the reference service.

    Returns:
        WidgetConfig with a valid key and no upload destination.
    """
    return WidgetConfig(
        api_key=DEMO_API_KEY,
        config_url=f"{BASE_URL}/api/v1/chatbot/info",
        stream_url=f"{BASE_URL}/stream/ask-question",
        upload_url=None,
        max_files=5,
        max_file_size_mb=10,
        notice_seconds=0.05,
    )


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for the reference service.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def png_bytes() -> bytes:
    """Return a 400x300 PNG image."""
    out = io.BytesIO()
    Image.new("RGB", (400, 300), (200, 30, 30)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def wait_for() -> Callable[[Callable[[], bool]], Awaitable[None]]:
    """Return a helper that yields to the event loop until a condition holds."""

    async def _wait_for(condition: Callable[[], bool], timeout: float = 2.0) -> None:
        async with asyncio.timeout(timeout):
            while not condition():
                await asyncio.sleep(0.001)

    return _wait_for
