"""Main application entry point.

Runs the FastAPI reference service (port 8000) with the NiceGUI chat widget
mounted on the same server. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    The widget talks to the reference service on the same port unless
    CHAT_*_URL variables point it elsewhere.
    """
    import uvicorn
    from nicegui import ui

    # Read when the chat routes are imported
    os.environ.setdefault("CHAT_DEMO_DELTA_DELAY", "0.05")

    from chat_widget.api.app import create_app
    from chat_widget.api.chat import DEMO_API_KEY

    # The local widget authenticates against the local reference service
    os.environ.setdefault("CHAT_API_KEY", DEMO_API_KEY)

    from chat_widget.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()

    ui.run_with(
        app,
        title="Chat Widget",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "chat-widget-secret"),
    )

    logger.info("Starting integrated server on http://localhost:8000")
    logger.info("API docs available at http://localhost:8000/docs")
    logger.info("Chat widget available at http://localhost:8000/")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_api() -> None:
    """Run only the reference answering service."""
    import uvicorn

    uvicorn.run(
        "chat_widget.api.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def main() -> None:
    """Application entry point.

    Set RUN_MODE=api to serve only the reference service.
    Default is integrated mode (service and widget on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting chat widget in {mode} mode")

    if mode == "api":
        run_api()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
