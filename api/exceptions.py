"""API カスタム例外定義

アプリケーション全体で使用するカスタム例外階層を定義します。
ユーザーへ返す文言とオペレーター向けのログ詳細を分離するため、
詳細情報は details に保持します。
"""

from typing import Any


class NanoBananaError(Exception):
    """基底例外クラス

    全てのカスタム例外の基底となるクラス。
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class MissingCredentialError(NanoBananaError):
    """認証情報未設定エラー

    AIプロバイダーのAPIキーがどこにも設定されていない場合に発生します。
    """
    pass


class GeminiError(NanoBananaError):
    """Geminiエラー

    Gemini APIの呼び出しに失敗した場合に発生します。
    """
    pass


class GeminiHTTPError(GeminiError):
    """Gemini HTTPエラー

    Gemini APIが2xx以外のステータスを返した場合に発生します。
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, details)


class GeminiResponseError(GeminiError):
    """Geminiレスポンス不正エラー

    ステータスは成功でも candidates[0].content.parts[0].text が無い場合に発生します。
    """
    pass


class GeminiConnectionError(GeminiError):
    """Gemini接続エラー

    ネットワーク障害などでGemini APIに到達できない場合に発生します。
    """
    pass


class GeminiTimeoutError(GeminiConnectionError):
    """Geminiタイムアウトエラー"""
    pass


class InvalidRequestError(NanoBananaError):
    """不正なリクエストエラー

    リクエストパラメータが不正な場合に発生します。
    """
    pass

