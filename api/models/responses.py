"""APIレスポンスの型定義

TypedDictを使用してAPIレスポンスの型安全性を確保します。
"""

from typing_extensions import TypedDict


class ChatResponse(TypedDict):
    """Webチャットレスポンス"""
    response: str


class SetupResponse(TypedDict):
    """Webhook登録レスポンス"""
    success: bool
    webhookUrl: str
    message: str


class WebhookAck(TypedDict):
    """Webhook受信レスポンス"""
    ok: bool


class HealthResponse(TypedDict):
    """ヘルスチェックレスポンス"""
    status: str
    version: str
    timestamp: str
    active_bots: int
