"""コマンドルーティング

/start, /help, /about を判定し、固定の返信文を生成します。
I/Oを持たない純粋な処理のみで構成します。
"""

import logging
from typing import Optional

from bot.models import CommandReply

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"

# 表示名が不明な場合（Webチャット等）の呼びかけ
DEFAULT_SENDER_NAME = "there"

# Telegram の parse_mode
MARKDOWN = "Markdown"

WELCOME_TEMPLATE = """🤖 *Welcome to Nano Banana AI!*

Hello {name}! I'm your AI assistant powered by Google's Gemini AI.

*Available commands:*
/start - Show this welcome message
/help - Get help information
/about - Learn more about me

Just send me any message and I'll do my best to help you!"""

HELP_TEXT = """🆘 *Help - Nano Banana AI*

I can help you with:
• Answering questions
• Explaining concepts
• Writing and editing text
• Solving problems
• Creative tasks
• And much more!

Just type your question or request, and I'll respond as quickly as possible.

*Tips:*
• Be specific in your questions
• You can ask follow-up questions
• I can handle multiple languages"""

ABOUT_TEXT = """ℹ️ *About Nano Banana AI*

I'm an AI assistant powered by Google's Gemini AI model. I was created to help users with various tasks through natural conversation.

*Features:*
• Natural language understanding
• Multi-topic conversations
• Real-time responses
• Available 24/7

*Version:* 1.0
*Powered by:* Google Gemini AI
*Created by:* Nano Banana AI Team"""

UNKNOWN_COMMAND_TEXT = "Unknown command. Type /help to see available commands."

# Telegram の旧Markdownで特別な意味を持つ文字
MARKDOWN_SPECIAL_CHARS = "_*`["

COMMANDS: dict[str, CommandReply] = {
    "/start": CommandReply.WELCOME,
    "/help": CommandReply.HELP,
    "/about": CommandReply.ABOUT,
}


def escape_markdown(text: str) -> str:
    """旧Markdownの記号をバックスラッシュでエスケープ"""
    return "".join("\\" + ch if ch in MARKDOWN_SPECIAL_CHARS else ch for ch in text)


class CommandRouter:
    """コマンドルーター

    責務:
    - テキストがコマンドかどうかの判定
    - コマンド種別の決定
    - 返信文のレンダリング
    """

    def route(self, text: str) -> Optional[CommandReply]:
        """コマンド種別を判定

        先頭の空白区切りトークンを小文字化し、"@botname" を除いて照合します。

        Args:
            text: 受信テキスト

        Returns:
            コマンド種別（コマンドでない場合はNone）
        """
        if not text.startswith(COMMAND_PREFIX):
            return None

        parts = text.split(maxsplit=1)
        word = parts[0] if parts else text
        command = word.split("@", 1)[0].lower()

        reply = COMMANDS.get(command, CommandReply.UNKNOWN)

        logger.debug(
            "Command routed",
            extra={"command": command, "reply": reply.value}
        )

        return reply

    def render(self, reply: CommandReply, sender_name: Optional[str] = None) -> str:
        """返信文を生成

        Args:
            reply: コマンド種別
            sender_name: 送信者の表示名（/start でのみ使用）

        Returns:
            返信文
        """
        if reply is CommandReply.WELCOME:
            # 表示名は旧Markdownの記号をエスケープして埋め込む
            name = escape_markdown(sender_name) if sender_name else DEFAULT_SENDER_NAME
            return WELCOME_TEMPLATE.format(name=name)
        if reply is CommandReply.HELP:
            return HELP_TEXT
        if reply is CommandReply.ABOUT:
            return ABOUT_TEXT
        return UNKNOWN_COMMAND_TEXT

    def parse_mode_for(self, reply: CommandReply) -> Optional[str]:
        """Telegram送信時の parse_mode（未知のコマンドはプレーンテキスト）"""
        if reply is CommandReply.UNKNOWN:
            return None
        return MARKDOWN
