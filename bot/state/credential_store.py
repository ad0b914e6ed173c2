"""ボット登録情報の管理

ボットトークンごとのWebhook URLとGeminiのAPIキーを保持します。
ストアはWebhookの呼び出し側に注入され、ライフサイクルはホストプロセスが持ちます。
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from api.exceptions import MissingCredentialError
from bot.models import BotRegistration

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """ボット登録情報のキーバリューストア"""

    def register(self, registration: BotRegistration) -> None: ...

    def get(self, bot_token: str) -> Optional[BotRegistration]: ...

    def remove(self, bot_token: str) -> bool: ...

    def __len__(self) -> int: ...


class InMemoryCredentialStore:
    """プロセス内メモリのストア

    再起動で登録は消えるため、永続化が必要な場合は同じインターフェースで差し替える。
    """

    def __init__(self) -> None:
        """初期化"""
        # ボットトークン -> 登録情報
        self._registrations: dict[str, BotRegistration] = {}

        logger.info("InMemoryCredentialStore initialized")

    def register(self, registration: BotRegistration) -> None:
        """登録情報を保存（同じトークンは上書き）

        Args:
            registration: 登録情報
        """
        if registration.setup_time is None:
            registration.setup_time = datetime.now(timezone.utc)

        self._registrations[registration.token] = registration
        logger.info(
            "Bot registered",
            extra={
                "webhook_url": registration.webhook_url.replace(registration.token, "***"),
                "has_api_key": bool(registration.api_key),
            }
        )

    def get(self, bot_token: str) -> Optional[BotRegistration]:
        """登録情報を取得

        Returns:
            登録情報（未登録の場合はNone）
        """
        return self._registrations.get(bot_token)

    def remove(self, bot_token: str) -> bool:
        """登録情報を削除

        Returns:
            削除した場合はTrue
        """
        return self._registrations.pop(bot_token, None) is not None

    def __len__(self) -> int:
        return len(self._registrations)


def resolve_credential(
    registration: Optional[BotRegistration],
    default_api_key: Optional[str],
) -> Optional[str]:
    """Telegramチャネルで使うAPIキーを決定

    優先順位: ボット登録時のAPIキー > サーバー設定のデフォルト。
    空文字は未設定として扱う。
    """
    if registration is not None and registration.api_key:
        return registration.api_key
    return default_api_key or None


def require_credential(
    registration: Optional[BotRegistration],
    default_api_key: Optional[str],
) -> str:
    """resolve_credential と同じ規則で、見つからなければ例外を送出

    Raises:
        MissingCredentialError: どちらにもAPIキーが無い場合
    """
    credential = resolve_credential(registration, default_api_key)
    if credential is None:
        raise MissingCredentialError(
            "Gemini API key is not configured",
            details={"registered": registration is not None},
        )
    return credential


# シングルトンインスタンス
_store: Optional[InMemoryCredentialStore] = None


def get_credential_store() -> InMemoryCredentialStore:
    """ストアのシングルトンインスタンスを取得"""
    global _store
    if _store is None:
        _store = InMemoryCredentialStore()
    return _store
