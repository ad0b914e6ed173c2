"""Bot用型定義

リレー内部で使う不変のメッセージ型と、Telegram APIとの通信の型を定義します。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict, NotRequired


@dataclass(frozen=True)
class InboundMessage:
    """受信メッセージ（チャネル非依存）

    1イベントにつき1つ生成し、返信を1つ作ったら破棄する。
    """
    text: str
    sender_id: Optional[int] = None
    chat_id: Optional[int] = None
    sender_name: Optional[str] = None


class CommandReply(str, Enum):
    """コマンド応答の種類"""
    WELCOME = "welcome"
    HELP = "help"
    ABOUT = "about"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RelayReply:
    """リレーが生成した返信

    parse_mode はTelegram送信時にのみ使用します。
    """
    text: str
    parse_mode: Optional[str] = None


@dataclass
class BotRegistration:
    """Webhook登録済みボットの情報"""
    token: str
    webhook_url: str
    api_key: Optional[str] = None
    setup_time: datetime | None = None


class TelegramResult(TypedDict):
    """Telegram APIのレスポンスエンベロープ"""
    ok: bool
    result: NotRequired[object]
    description: NotRequired[str]
    error_code: NotRequired[int]
