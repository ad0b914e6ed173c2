"""メッセージリレー

受信テキスト1件から返信テキストをちょうど1件生成します。
コマンドは CommandRouter で処理し、それ以外は Gemini に転送します。
返信の送信は呼び出し側（チャネルごとのアダプター）の責務です。
"""

import logging
from typing import Optional

from api.exceptions import GeminiError, GeminiHTTPError
from api.gemini_client import GeminiClient, GenerationConfig
from bot.handlers.command_router import CommandRouter
from bot.models import InboundMessage, RelayReply

logger = logging.getLogger(__name__)

NOT_CONFIGURED_TEXT = (
    "Sorry, the AI service is not configured. Please contact the administrator."
)
APOLOGY_TEXT = (
    "Sorry, I encountered an error processing your message. Please try again later."
)


class MessageRelay:
    """メッセージリレー

    状態を持たないため、同時に届いたイベントを並行に処理しても互いに干渉しない。
    """

    def __init__(
        self,
        gemini_client: GeminiClient,
        command_router: Optional[CommandRouter] = None,
        generation_config: Optional[GenerationConfig] = None,
    ):
        """初期化

        Args:
            gemini_client: Geminiクライアント
            command_router: コマンドルーター（省略時は新規作成）
            generation_config: 生成パラメータ（省略時はデフォルト値）
        """
        self.gemini_client = gemini_client
        self.command_router = command_router or CommandRouter()
        self.generation_config = generation_config or GenerationConfig()

    async def respond(
        self,
        message: InboundMessage,
        credential: Optional[str],
    ) -> RelayReply:
        """返信を生成（Telegram向けに parse_mode 付き）

        Args:
            message: 受信メッセージ
            credential: GeminiのAPIキー（未設定ならNone）

        Returns:
            返信
        """
        command = self.command_router.route(message.text)
        if command is not None:
            logger.info(
                "Command received",
                extra={"sender_id": message.sender_id, "reply": command.value}
            )
            return RelayReply(
                text=self.command_router.render(command, message.sender_name),
                parse_mode=self.command_router.parse_mode_for(command),
            )

        if not credential:
            logger.warning(
                "Gemini API key not configured",
                extra={"sender_id": message.sender_id}
            )
            return RelayReply(text=NOT_CONFIGURED_TEXT)

        try:
            text = await self.gemini_client.generate_content(
                prompt=message.text,
                api_key=credential,
                config=self.generation_config,
            )

        except GeminiError as e:
            logger.error(
                "Gemini request failed",
                extra={
                    "sender_id": message.sender_id,
                    "error_type": type(e).__name__,
                    "status_code": e.status_code if isinstance(e, GeminiHTTPError) else None,
                    "error": e.message,
                    "details": e.details,
                },
            )
            return RelayReply(text=APOLOGY_TEXT)

        except Exception as e:
            logger.error(
                "Unexpected error while relaying message",
                extra={"sender_id": message.sender_id, "error": str(e)},
                exc_info=True,
            )
            return RelayReply(text=APOLOGY_TEXT)

        logger.info(
            "Gemini response generated",
            extra={"sender_id": message.sender_id, "response_length": len(text)}
        )

        return RelayReply(text=text)

    async def handle(
        self,
        message: InboundMessage,
        credential: Optional[str],
    ) -> str:
        """返信テキストを生成

        Args:
            message: 受信メッセージ
            credential: GeminiのAPIキー（未設定ならNone）

        Returns:
            返信テキスト
        """
        reply = await self.respond(message, credential)
        return reply.text
