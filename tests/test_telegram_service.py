"""Tests for TelegramService: update parsing, relaying and webhook setup."""

import pytest

from api.exceptions import GeminiHTTPError, InvalidRequestError
from api.services.telegram_service import parse_update
from bot.exceptions import UpdateParseError, WebhookRegistrationError
from bot.handlers.command_router import MARKDOWN, WELCOME_TEMPLATE
from bot.handlers.message_relay import APOLOGY_TEXT, NOT_CONFIGURED_TEXT
from bot.models import BotRegistration, InboundMessage

BOT_TOKEN = "123456789:AAtest-token-value"


def _update(text="hello", first_name="Ada"):
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "chat": {"id": 555, "type": "private"},
            "from": {"id": 42, "first_name": first_name},
            "text": text,
        },
    }


class TestParseUpdate:
    def test_text_message(self):
        assert parse_update(_update()) == InboundMessage(
            text="hello", sender_id=42, chat_id=555, sender_name="Ada"
        )

    @pytest.mark.parametrize("update", [
        {"update_id": 1},
        {"update_id": 1, "edited_message": {"text": "x"}},
        {"update_id": 1, "message": {"chat": {"id": 1}, "sticker": {}}},
        {"update_id": 1, "message": {"chat": {"id": 1}, "text": ""}},
    ])
    def test_updates_without_text_are_ignored(self, update):
        assert parse_update(update) is None

    def test_missing_chat(self):
        with pytest.raises(UpdateParseError):
            parse_update({"message": {"text": "hi"}})

    @pytest.mark.parametrize("message", [
        {"chat": {"id": 1}, "text": 123},
        {"chat": {"id": 1}, "text": ["hi"]},
        {"chat": {"id": 1}, "text": "hi", "from": "x"},
        {"chat": {"id": 1}, "text": "hi", "from": [42]},
    ])
    def test_wrong_field_types(self, message):
        with pytest.raises(UpdateParseError):
            parse_update({"update_id": 1, "message": message})

    def test_missing_sender(self):
        msg = parse_update({"message": {"chat": {"id": 1}, "text": "hi"}})
        assert msg.sender_id is None
        assert msg.sender_name is None


class TestProcessUpdate:
    @pytest.mark.asyncio
    async def test_ai_reply_sent_with_registered_key(
        self, telegram_service, store, gemini_client, telegram_client
    ):
        store.register(BotRegistration(token=BOT_TOKEN, webhook_url="https://x", api_key="bot-key"))
        telegram_service.api_settings.gemini_api_key = "env-key"

        assert await telegram_service.process_update(_update(), BOT_TOKEN) is True

        assert gemini_client.generate_content.await_args.kwargs["api_key"] == "bot-key"
        telegram_client.send_message.assert_awaited_once_with(
            BOT_TOKEN, 555, "AI reply", parse_mode=None
        )

    @pytest.mark.asyncio
    async def test_default_key_used_when_registration_has_none(
        self, telegram_service, store, gemini_client
    ):
        store.register(BotRegistration(token=BOT_TOKEN, webhook_url="https://x"))
        telegram_service.api_settings.gemini_api_key = "env-key"

        await telegram_service.process_update(_update(), BOT_TOKEN)
        assert gemini_client.generate_content.await_args.kwargs["api_key"] == "env-key"

    @pytest.mark.asyncio
    async def test_not_configured(self, telegram_service, gemini_client, telegram_client):
        await telegram_service.process_update(_update(), BOT_TOKEN)

        gemini_client.generate_content.assert_not_awaited()
        telegram_client.send_message.assert_awaited_once_with(
            BOT_TOKEN, 555, NOT_CONFIGURED_TEXT, parse_mode=None
        )

    @pytest.mark.asyncio
    async def test_start_command_markdown(self, telegram_service, telegram_client):
        await telegram_service.process_update(_update("/start", "Ada"), BOT_TOKEN)
        telegram_client.send_message.assert_awaited_once_with(
            BOT_TOKEN, 555, WELCOME_TEMPLATE.format(name="Ada"), parse_mode=MARKDOWN
        )

    @pytest.mark.asyncio
    async def test_start_command_escapes_sender_name(self, telegram_service, telegram_client):
        await telegram_service.process_update(_update("/start", "Mary_Jane"), BOT_TOKEN)
        sent_text = telegram_client.send_message.await_args.args[2]
        assert "Hello Mary\\_Jane!" in sent_text

    @pytest.mark.asyncio
    async def test_provider_failure_sends_apology(
        self, telegram_service, gemini_client, telegram_client
    ):
        telegram_service.api_settings.gemini_api_key = "env-key"
        gemini_client.generate_content.side_effect = GeminiHTTPError("boom", status_code=500)

        await telegram_service.process_update(_update(), BOT_TOKEN)
        telegram_client.send_message.assert_awaited_once_with(
            BOT_TOKEN, 555, APOLOGY_TEXT, parse_mode=None
        )

    @pytest.mark.asyncio
    async def test_update_without_text(self, telegram_service, telegram_client):
        assert await telegram_service.process_update({"update_id": 3}, BOT_TOKEN) is False
        telegram_client.send_message.assert_not_awaited()


class TestKnownBot:
    def test_registered(self, telegram_service, store):
        store.register(BotRegistration(token=BOT_TOKEN, webhook_url="https://x"))
        assert telegram_service.is_known_bot(BOT_TOKEN) is True

    def test_unregistered(self, telegram_service):
        assert telegram_service.is_known_bot(BOT_TOKEN) is False

    def test_unregistered_allowed(self, telegram_service):
        telegram_service.bot_settings.allow_unregistered_bots = True
        assert telegram_service.is_known_bot(BOT_TOKEN) is True


class TestSetupWebhook:
    @pytest.mark.asyncio
    async def test_default_url_and_registration(self, telegram_service, telegram_client, store):
        registration = await telegram_service.setup_webhook(BOT_TOKEN, api_key="bot-key")

        expected_url = f"https://relay.example/webhook/{BOT_TOKEN}"
        assert registration.webhook_url == expected_url
        telegram_client.set_webhook.assert_awaited_once_with(BOT_TOKEN, expected_url)
        assert store.get(BOT_TOKEN).api_key == "bot-key"

    @pytest.mark.asyncio
    async def test_explicit_url(self, telegram_service, telegram_client):
        registration = await telegram_service.setup_webhook(BOT_TOKEN, "https://custom.example/hook")
        assert registration.webhook_url == "https://custom.example/hook"
        assert registration.api_key is None

    @pytest.mark.asyncio
    async def test_no_url_available(self, telegram_service, telegram_client):
        telegram_service.bot_settings.public_base_url = ""
        with pytest.raises(InvalidRequestError):
            await telegram_service.setup_webhook(BOT_TOKEN)
        telegram_client.set_webhook.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_is_not_stored(self, telegram_service, telegram_client, store):
        telegram_client.set_webhook.side_effect = WebhookRegistrationError("bad webhook")
        with pytest.raises(WebhookRegistrationError):
            await telegram_service.setup_webhook(BOT_TOKEN)
        assert store.get(BOT_TOKEN) is None
