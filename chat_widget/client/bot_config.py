"""Bot configuration loading."""

import logging

import httpx

from chat_widget.errors import AuthError, ConfigError
from chat_widget.models.schemas import BotConfig

logger = logging.getLogger(__name__)


async def fetch_bot_config(client: httpx.AsyncClient, url: str, api_key: str) -> BotConfig:
    """Fetch bot metadata for a credential.

    Args:
        client: HTTP client to use.
        url: Configuration endpoint.
        api_key: Credential sent as the X-Api-Key header.

    Returns:
        The bot's configuration.

    Raises:
        AuthError: If the credential is rejected (401).
        ConfigError: On any other failure.
    """
    try:
        response = await client.get(url, headers={"X-Api-Key": api_key})
    except httpx.RequestError as e:
        raise ConfigError(f"Failed to connect to chatbot service: {e}") from e

    if response.status_code == httpx.codes.UNAUTHORIZED:
        raise AuthError("Unauthorized or invalid API key")
    if response.is_error:
        raise ConfigError(f"Failed to load chatbot config (HTTP {response.status_code})")

    try:
        config = BotConfig.model_validate(response.json()["result"])
    except (ValueError, KeyError, TypeError) as e:
        raise ConfigError(f"Invalid chatbot config response: {e}") from e

    logger.info(f"Loaded chatbot config for {config.display_name} ({config.uuid})")
    return config
