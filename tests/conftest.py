"""Shared fixtures for relay tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from api.config import APISettings
from api.services.chat_service import ChatService
from api.services.telegram_service import TelegramService
from bot.config import BotSettings
from bot.handlers import MessageRelay
from bot.state.credential_store import InMemoryCredentialStore


@pytest.fixture
def gemini_client():
    """GeminiClient stand-in whose generate_content succeeds with 'AI reply'."""
    client = MagicMock()
    client.generate_content = AsyncMock(return_value="AI reply")
    return client


@pytest.fixture
def relay(gemini_client):
    return MessageRelay(gemini_client=gemini_client)


@pytest.fixture
def telegram_client():
    client = MagicMock()
    client.send_message = AsyncMock(return_value={"ok": True, "result": {}})
    client.set_webhook = AsyncMock(return_value={"ok": True, "result": True})
    client.get_me = AsyncMock(return_value={"ok": True, "result": {"id": 1, "username": "nano_bot"}})
    return client


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def api_settings():
    return APISettings(gemini_api_key=None)


@pytest.fixture
def bot_settings():
    return BotSettings(public_base_url="https://relay.example", allow_unregistered_bots=False)


@pytest.fixture
def telegram_service(relay, telegram_client, store, api_settings, bot_settings):
    service = TelegramService(
        relay=relay,
        telegram_client=telegram_client,
        credential_store=store,
    )
    service.api_settings = api_settings
    service.bot_settings = bot_settings
    return service


@pytest.fixture
def chat_service(relay, api_settings):
    service = ChatService(relay=relay)
    service.settings = api_settings
    return service
