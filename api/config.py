"""API設定管理モジュール

GeminiのAPIキーは任意。未設定の場合、Webチャットはリクエストごとの
apiKey、Telegramはボット登録時のapiKeyに頼ることになる。
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """API設定クラス

    環境変数から設定を読み込み、型チェックとバリデーションを実行します。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # === Gemini関連 ===
    gemini_api_key: Optional[str] = None
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"

    # === API関連 ===
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # === ハードコード定数（環境変数不要） ===
    @property
    def api_version(self) -> str:
        """APIバージョン"""
        return "1.0.0"

    @property
    def cors_origins(self) -> list[str]:
        """CORS許可オリジン"""
        return ["*"]


# グローバル設定インスタンス
_settings: APISettings | None = None


def get_settings() -> APISettings:
    """設定インスタンスを取得（シングルトン）"""
    global _settings
    if _settings is None:
        _settings = APISettings()
    return _settings


def reload_settings() -> APISettings:
    """設定を再読み込み（主にテスト用）"""
    global _settings
    _settings = APISettings()
    return _settings
