"""Bot カスタム例外定義

API側のexceptions.pyと同様のパターンを採用。
Telegram側の失敗をドメイン固有の例外として扱う。
"""

from typing import Any, Optional


class BotError(Exception):
    """Bot基底例外クラス

    全てのBot固有例外の親クラス。
    エラーメッセージと詳細情報を保持。
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Args:
            message: エラーメッセージ
            details: エラーの詳細情報（デバッグ用）
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class TelegramAPIError(BotError):
    """Telegram Bot API呼び出し時のエラー

    ネットワーク障害、JSONとして読めないレスポンスなど。
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


class WebhookRegistrationError(BotError):
    """Webhook登録のエラー

    setWebhook が ok: false を返した場合に発生。
    message には Telegram の description が入る。
    """
    pass


class UpdateParseError(BotError):
    """Webhookで受け取ったアップデートが解釈できない場合のエラー"""
    pass
