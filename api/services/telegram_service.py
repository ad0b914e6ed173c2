"""Telegramサービス

Webhookで受け取ったアップデートをリレーに渡して返信を送信する処理と、
Webhook登録を担当します。
"""

import logging
from typing import Any, Optional

from api.config import get_settings as get_api_settings
from api.exceptions import InvalidRequestError
from bot.config import get_settings as get_bot_settings
from bot.exceptions import UpdateParseError
from bot.handlers.message_relay import MessageRelay
from bot.models import BotRegistration, InboundMessage, TelegramResult
from bot.state.credential_store import CredentialStore, resolve_credential
from bot.telegram_client import TelegramClient, mask_token

logger = logging.getLogger(__name__)


def parse_update(update: dict[str, Any]) -> Optional[InboundMessage]:
    """TelegramのアップデートをInboundMessageに変換

    テキストを含まないアップデート（スタンプ、編集通知など）はNoneを返します。

    Raises:
        UpdateParseError: テキストやチャットID、送信者の形式が不正な場合
    """
    message = update.get("message")
    if not isinstance(message, dict) or not message.get("text"):
        return None

    details = {"update_id": update.get("update_id")}

    if not isinstance(message["text"], str):
        raise UpdateParseError("Update message text is not a string", details=details)

    chat = message.get("chat")
    if not isinstance(chat, dict) or "id" not in chat:
        raise UpdateParseError("Update message has no chat id", details=details)

    sender = message.get("from")
    if sender is None:
        sender = {}
    elif not isinstance(sender, dict):
        raise UpdateParseError("Update message sender is not an object", details=details)

    return InboundMessage(
        text=message["text"],
        sender_id=sender.get("id"),
        chat_id=chat["id"],
        sender_name=sender.get("first_name"),
    )


class TelegramService:
    """Telegramサービスクラス

    ボットごとの登録情報はストアから参照し、返信の生成はリレーに委譲します。
    """

    def __init__(
        self,
        relay: MessageRelay,
        telegram_client: TelegramClient,
        credential_store: CredentialStore,
    ) -> None:
        """初期化

        Args:
            relay: メッセージリレー
            telegram_client: Telegramクライアント
            credential_store: ボット登録情報ストア
        """
        self.relay = relay
        self.telegram_client = telegram_client
        self.credential_store = credential_store
        self.api_settings = get_api_settings()
        self.bot_settings = get_bot_settings()

    def is_known_bot(self, bot_token: str) -> bool:
        """Webhookを受け付けるボットかどうか"""
        if self.credential_store.get(bot_token) is not None:
            return True
        return self.bot_settings.allow_unregistered_bots

    async def process_update(self, update: dict[str, Any], bot_token: str) -> bool:
        """アップデートを処理し、返信を送信する

        Args:
            update: Telegramのアップデート
            bot_token: ボットトークン

        Returns:
            返信を送信した場合はTrue、無視した場合はFalse

        Raises:
            UpdateParseError: アップデートが不正
            TelegramAPIError: 返信の送信に失敗
        """
        message = parse_update(update)
        if message is None:
            logger.debug(
                "Ignoring update without text",
                extra={"update_id": update.get("update_id")}
            )
            return False

        logger.info(
            "Received Telegram message",
            extra={
                "bot": mask_token(bot_token),
                "sender_id": message.sender_id,
                "text_length": len(message.text),
            }
        )

        credential = resolve_credential(
            self.credential_store.get(bot_token),
            self.api_settings.gemini_api_key,
        )
        reply = await self.relay.respond(message, credential)

        await self.telegram_client.send_message(
            bot_token,
            message.chat_id,
            reply.text,
            parse_mode=reply.parse_mode,
        )
        return True

    async def setup_webhook(
        self,
        bot_token: str,
        webhook_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> BotRegistration:
        """Webhookを登録し、成功したらストアに保存する

        Args:
            bot_token: ボットトークン
            webhook_url: Webhook URL（省略時は public_base_url から構築）
            api_key: このボットで使うGeminiのAPIキー（任意）

        Returns:
            登録情報

        Raises:
            InvalidRequestError: Webhook URLが決まらない場合
            WebhookRegistrationError: Telegramが登録を拒否した場合
            TelegramAPIError: 通信失敗
        """
        url = webhook_url or self.bot_settings.build_webhook_url(bot_token)
        if not url:
            raise InvalidRequestError("Webhook URL is required")

        await self.telegram_client.set_webhook(bot_token, url)

        registration = BotRegistration(
            token=bot_token,
            webhook_url=url,
            api_key=api_key or None,
        )
        self.credential_store.register(registration)
        return registration

    async def get_bot_info(self, bot_token: str) -> TelegramResult:
        """getMe の結果を返す"""
        return await self.telegram_client.get_me(bot_token)
