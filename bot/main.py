"""
Telegram Webhook 登録スクリプト

APIサーバーを経由せずに、オペレーターがボットのWebhook URLを登録する。
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from bot.config import get_settings
from bot.exceptions import TelegramAPIError, WebhookRegistrationError
from bot.telegram_client import get_telegram_client, mask_token

# ロガー設定
logger = logging.getLogger(__name__)

# 環境変数の読み込み
load_dotenv()


async def register_webhook(bot_token: str, webhook_url: str) -> bool:
    """Webhookを登録して結果を表示する

    Args:
        bot_token: ボットトークン
        webhook_url: 登録するURL

    Returns:
        成功した場合はTrue
    """
    client = get_telegram_client()

    try:
        await client.set_webhook(bot_token, webhook_url)

    except WebhookRegistrationError as e:
        print(f"❌ Telegram rejected the webhook: {e.message}")
        return False

    except TelegramAPIError as e:
        print(f"❌ Cannot reach Telegram: {e.message}")
        return False

    print(f"✓ Webhook set for bot {mask_token(bot_token)}")
    print(f"  URL: {webhook_url.replace(bot_token, '<token>')}")
    return True


def main() -> None:
    """
    メインエントリーポイント：Webhookを登録する

    環境変数 TELEGRAM_BOT_TOKEN と TELEGRAM_WEBHOOK_URL（未設定なら
    PUBLIC_BASE_URL から構築）を読み込み、setWebhook を1回呼び出す。

    Raises:
        ValueError: TELEGRAM_BOT_TOKEN またはWebhook URLが決まらない場合
    """
    logging.basicConfig(level=logging.INFO)

    token = os.getenv("TELEGRAM_BOT_TOKEN")
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN not found in environment variables")

    webhook_url = os.getenv("TELEGRAM_WEBHOOK_URL") or get_settings().build_webhook_url(token)
    if not webhook_url:
        raise ValueError("Set TELEGRAM_WEBHOOK_URL or PUBLIC_BASE_URL")

    logger.info("Registering Telegram webhook")
    success = asyncio.run(register_webhook(token, webhook_url))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
