"""チャットサービス

Webチャットからのメッセージをリレーに渡して返信テキストを返します。
"""

import logging
from typing import Optional

from api.config import get_settings
from bot.handlers.message_relay import MessageRelay
from bot.models import InboundMessage

logger = logging.getLogger(__name__)


class ChatService:
    """チャットサービスクラス

    APIキーはリクエストで渡されたものを優先し、無ければサーバー設定を使います。
    """

    def __init__(self, relay: MessageRelay) -> None:
        """初期化

        Args:
            relay: メッセージリレー
        """
        self.relay = relay
        self.settings = get_settings()

    async def reply(self, text: str, api_key: Optional[str] = None) -> str:
        """返信テキストを生成

        Args:
            text: ユーザーの入力
            api_key: ブラウザ側で保持しているAPIキー（任意）

        Returns:
            返信テキスト
        """
        credential = api_key or self.settings.gemini_api_key

        logger.info(
            "Web chat message received",
            extra={"text_length": len(text), "has_api_key": bool(api_key)}
        )

        return await self.relay.handle(InboundMessage(text=text), credential)
