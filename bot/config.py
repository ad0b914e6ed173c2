"""Bot設定管理モジュール

Telegram Bot API とWebhook登録に関する設定。
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BotSettings(BaseSettings):
    """Bot設定クラス

    環境変数から設定を読み込み、型チェックとバリデーションを実行します。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    telegram_api_url: str = "https://api.telegram.org"

    # Webhook URLの組み立てに使う公開URL（例: https://example.netlify.app）
    public_base_url: str = ""

    # 未登録のボットトークン宛てのWebhookも処理する（サーバーレス運用向け）
    allow_unregistered_bots: bool = False

    # === ハードコード定数（環境変数不要） ===
    @property
    def webhook_path_prefix(self) -> str:
        """Webhookエンドポイントのパス"""
        return "/webhook"

    def build_webhook_url(self, bot_token: str) -> str:
        """ボットトークンからデフォルトのWebhook URLを構築

        public_base_url が未設定の場合は空文字を返します。
        """
        if not self.public_base_url:
            return ""
        base = self.public_base_url.rstrip("/")
        return f"{base}{self.webhook_path_prefix}/{bot_token}"


# グローバル設定インスタンス
_settings: BotSettings | None = None


def get_settings() -> BotSettings:
    """設定インスタンスを取得（シングルトン）"""
    global _settings
    if _settings is None:
        _settings = BotSettings()
    return _settings


def reload_settings() -> BotSettings:
    """設定を再読み込み（主にテスト用）"""
    global _settings
    _settings = BotSettings()
    return _settings
