"""Nano Banana AI Relay API

WebチャットとTelegram Webhookからのメッセージを Gemini に中継する
APIエンドポイントを提供します。
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from api.config import get_settings
from api.exceptions import InvalidRequestError
from api.gemini_client import get_gemini_client
from api.models.responses import (
    ChatResponse,
    HealthResponse,
    SetupResponse,
    WebhookAck,
)
from api.services.chat_service import ChatService
from api.services.telegram_service import TelegramService
from bot.exceptions import (
    TelegramAPIError,
    UpdateParseError,
    WebhookRegistrationError,
)
from bot.handlers import MessageRelay
from bot.state.credential_store import InMemoryCredentialStore, get_credential_store
from bot.telegram_client import get_telegram_client, mask_token

# ログ設定
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 設定読み込み
settings = get_settings()

# FastAPIアプリケーション初期化
app = FastAPI(
    title="Nano Banana AI Relay API",
    description="Relays web chat and Telegram bot messages to Google Gemini",
    version=settings.api_version,
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === サービスの依存性注入 ===

# グローバルサービスインスタンス
_relay: Optional[MessageRelay] = None
_chat_service: Optional[ChatService] = None
_telegram_service: Optional[TelegramService] = None


def get_relay() -> MessageRelay:
    """MessageRelayのシングルトンインスタンスを取得"""
    global _relay
    if _relay is None:
        _relay = MessageRelay(gemini_client=get_gemini_client())
    return _relay


def get_chat_service() -> ChatService:
    """ChatServiceのシングルトンインスタンスを取得

    FastAPIの依存性注入で使用されます。
    """
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService(relay=get_relay())
    return _chat_service


def get_telegram_service() -> TelegramService:
    """TelegramServiceのシングルトンインスタンスを取得

    FastAPIの依存性注入で使用されます。
    """
    global _telegram_service
    if _telegram_service is None:
        _telegram_service = TelegramService(
            relay=get_relay(),
            telegram_client=get_telegram_client(),
            credential_store=get_credential_store(),
        )
    return _telegram_service


# === リクエストモデル ===

class ChatRequest(BaseModel):
    """Webチャットリクエスト"""
    message: Optional[str] = None
    apiKey: Optional[str] = None


class SetupRequest(BaseModel):
    """Webhook登録リクエスト"""
    botToken: str = ""
    webhookUrl: Optional[str] = None
    apiKey: Optional[str] = None


# === エンドポイント ===

@app.get("/")
async def root() -> dict[str, str]:
    """ルートエンドポイント

    API情報を返します。
    """
    return {
        "message": "Nano Banana AI Relay API",
        "version": settings.api_version,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check(
    credential_store: InMemoryCredentialStore = Depends(get_credential_store),
) -> HealthResponse:
    """ヘルスチェックエンドポイント

    サービスの稼働状態と登録済みボット数を返します。
    """
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        timestamp=datetime.now(timezone.utc).isoformat(),
        active_bots=len(credential_store),
    )


@app.post("/api/chat")
@app.post("/api/gemini")
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Webチャットのメッセージに返信

    Gemini の失敗は謝罪文として200で返ります。
    """
    # 空判定のみ。リレーには受け取ったテキストをそのまま渡す
    if request.message is None or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        response = await chat_service.reply(request.message, api_key=request.apiKey)
        return ChatResponse(response=response)

    except Exception as e:
        logger.error(
            "Unexpected error in chat endpoint",
            extra={"error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Failed to get AI response"
        ) from e


@app.post("/api/telegram/setup")
async def setup_telegram(
    request: SetupRequest,
    telegram_service: TelegramService = Depends(get_telegram_service),
) -> SetupResponse:
    """TelegramボットのWebhookを登録

    1. Webhook URLを決定（未指定なら公開URLから構築）
    2. setWebhook を呼び出し
    3. 成功したらボットとAPIキーをストアに登録

    Raises:
        HTTPException: 登録失敗時
    """
    if not request.botToken:
        raise HTTPException(status_code=400, detail="Bot token is required")

    try:
        registration = await telegram_service.setup_webhook(
            bot_token=request.botToken,
            webhook_url=request.webhookUrl,
            api_key=request.apiKey,
        )
        logger.info(
            "Telegram webhook set",
            extra={"bot": mask_token(request.botToken)}
        )
        return SetupResponse(
            success=True,
            webhookUrl=registration.webhook_url,
            message="Telegram bot webhook set successfully",
        )

    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    except WebhookRegistrationError as e:
        logger.warning(
            "Telegram rejected webhook",
            extra={"bot": mask_token(request.botToken), "error": e.message}
        )
        raise HTTPException(status_code=400, detail=e.message) from e

    except Exception as e:
        logger.error(
            "Error setting up Telegram bot",
            extra={"bot": mask_token(request.botToken), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Failed to setup Telegram bot"
        ) from e


@app.post("/webhook/{bot_token}")
async def telegram_webhook(
    bot_token: str,
    update: dict[str, Any] = Body(...),
    telegram_service: TelegramService = Depends(get_telegram_service),
) -> WebhookAck:
    """Telegramからのアップデートを処理

    返信は Telegram の sendMessage で送るため、レスポンスは受領のみ。
    """
    if not telegram_service.is_known_bot(bot_token):
        logger.warning(
            "Webhook for unknown bot",
            extra={"bot": mask_token(bot_token)}
        )
        raise HTTPException(status_code=404, detail="Bot not found")

    try:
        await telegram_service.process_update(update, bot_token)
        return WebhookAck(ok=True)

    except UpdateParseError as e:
        logger.warning(
            "Malformed Telegram update",
            extra={"bot": mask_token(bot_token), "error": e.message}
        )
        raise HTTPException(status_code=400, detail="Malformed update") from e

    except Exception as e:
        logger.error(
            "Error processing Telegram webhook",
            extra={"bot": mask_token(bot_token), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Failed to process update"
        ) from e


@app.get("/api/telegram/info/{bot_token}")
async def telegram_bot_info(
    bot_token: str,
    telegram_service: TelegramService = Depends(get_telegram_service),
) -> dict[str, Any]:
    """ボット情報（getMe）を返す"""
    try:
        result = await telegram_service.get_bot_info(bot_token)

    except TelegramAPIError as e:
        logger.error(
            "Error getting bot info",
            extra={"bot": mask_token(bot_token), "error": e.message},
        )
        raise HTTPException(status_code=500, detail="Failed to get bot info") from e

    if not result.get("ok"):
        raise HTTPException(
            status_code=400,
            detail=result.get("description") or "Failed to get bot info"
        )

    return result.get("result") or {}


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting API server",
        extra={"host": settings.api_host, "port": settings.api_port}
    )

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info",
    )
