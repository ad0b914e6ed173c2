"""メッセージハンドリングモジュール

このモジュールは、チャネルに依存しないリレーのビジネスロジックを管理します。
WebチャットとTelegram Webhookの両方のアダプターから同じ実装を呼び出します。

Modules:
    command_router: コマンド判定と固定返信文
    message_relay: 受信テキストから返信テキストを1件生成
"""

from bot.handlers.command_router import CommandRouter
from bot.handlers.message_relay import MessageRelay

__all__ = ["CommandRouter", "MessageRelay"]
