"""Telegram クライアント

Telegram Bot API と通信するための HTTP クライアント。
ボットトークンは呼び出しごとに受け取るため、1つのインスタンスで複数のボットを扱える。
"""

import logging
from typing import Any, Optional

import httpx

from bot.config import get_settings
from bot.exceptions import TelegramAPIError, WebhookRegistrationError
from bot.models import TelegramResult

logger = logging.getLogger(__name__)


def mask_token(bot_token: str) -> str:
    """ログ出力用にボットトークンを伏せる"""
    if len(bot_token) > 10:
        return f"{bot_token[:4]}...{bot_token[-4:]}"
    return "***"


class TelegramClient:
    """Telegram Bot API と通信するクライアント

    全てのHTTPリクエストを共通メソッドで処理し、
    エラーハンドリングとログを統一します。
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """クライアントを初期化

        Args:
            base_url: Bot APIのベースURL（省略時は設定から取得）
            transport: httpxのトランスポート（主にテスト用）
        """
        settings = get_settings()
        self.base_url = (base_url or settings.telegram_api_url).rstrip("/")
        self._transport = transport

        logger.info(
            "Telegram client initialized",
            extra={"base_url": self.base_url}
        )

    async def _call(
        self,
        bot_token: str,
        method: str,
        json_data: Optional[dict[str, Any]] = None,
    ) -> TelegramResult:
        """共通リクエストメソッド

        Telegram は ok: false でも JSON を返すため、HTTPステータスでは例外にしない。

        Args:
            bot_token: ボットトークン
            method: Bot APIメソッド名（sendMessage等）
            json_data: JSONボディ（Noneの場合はGET）

        Returns:
            Telegramのレスポンスエンベロープ

        Raises:
            TelegramAPIError: 通信失敗、またはJSONとして読めない場合
        """
        url = f"{self.base_url}/bot{bot_token}/{method}"
        log_extra = {"method": method, "bot": mask_token(bot_token)}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                if json_data is None:
                    response = await client.get(url)
                else:
                    response = await client.post(url, json=json_data)

            logger.info(
                f"Telegram {method} completed",
                extra={**log_extra, "status_code": response.status_code}
            )

            try:
                return response.json()
            except ValueError as e:
                logger.error(
                    "Failed to parse Telegram response",
                    extra={**log_extra, "status_code": response.status_code},
                )
                raise TelegramAPIError(
                    f"Invalid JSON from Telegram {method}",
                    status_code=response.status_code,
                    details=log_extra,
                ) from e

        except httpx.RequestError as e:
            logger.error(
                "Telegram request error",
                extra={**log_extra, "error": type(e).__name__},
                exc_info=True
            )
            raise TelegramAPIError(
                f"Telegram {method} request failed",
                details={**log_extra, "error": type(e).__name__},
            ) from e

    async def send_message(
        self,
        bot_token: str,
        chat_id: int,
        text: str,
        parse_mode: Optional[str] = None,
    ) -> TelegramResult:
        """メッセージを送信する

        ok: false の場合はログに残してそのまま返す。

        Args:
            bot_token: ボットトークン
            chat_id: 送信先チャットID
            text: 本文
            parse_mode: "Markdown" 等（省略時はプレーンテキスト）

        Returns:
            Telegramのレスポンスエンベロープ
        """
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode

        result = await self._call(bot_token, "sendMessage", payload)

        if not result.get("ok"):
            logger.error(
                "Failed to send Telegram message",
                extra={
                    "chat_id": chat_id,
                    "description": result.get("description"),
                }
            )

        return result

    async def set_webhook(self, bot_token: str, url: str) -> TelegramResult:
        """Webhook URLを登録する

        Raises:
            WebhookRegistrationError: Telegram が ok: false を返した場合
            TelegramAPIError: 通信失敗
        """
        logger.info(
            "Registering webhook",
            extra={"bot": mask_token(bot_token), "webhook_url": url.replace(bot_token, "***")}
        )

        result = await self._call(bot_token, "setWebhook", {"url": url})

        if not result.get("ok"):
            raise WebhookRegistrationError(
                result.get("description") or "Failed to set webhook",
                details={"error_code": result.get("error_code")},
            )

        return result

    async def get_me(self, bot_token: str) -> TelegramResult:
        """ボット情報を取得する"""
        return await self._call(bot_token, "getMe")


# シングルトンインスタンス
_client: Optional[TelegramClient] = None


def get_telegram_client() -> TelegramClient:
    """Telegram クライアントのシングルトンインスタンスを取得

    Returns:
        Telegramクライアント
    """
    global _client
    if _client is None:
        _client = TelegramClient()
    return _client


def reset_telegram_client() -> None:
    """Telegram クライアントをリセット（主にテスト用）"""
    global _client
    _client = None
