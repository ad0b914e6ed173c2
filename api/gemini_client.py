"""
Gemini API クライアント

Google Gemini の generateContent エンドポイントと通信するクライアント。
APIキーは呼び出しごとに受け取り、クライアント自体は保持しない。
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from api.config import get_settings
from api.exceptions import (
    GeminiConnectionError,
    GeminiHTTPError,
    GeminiResponseError,
    GeminiTimeoutError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    """生成パラメータ"""
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024

    def to_payload(self) -> Dict[str, Any]:
        """Gemini API の generationConfig 形式（camelCase）に変換"""
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


def extract_candidate_text(data: Any) -> str:
    """レスポンスから candidates[0].content.parts[0].text を取り出す

    Raises:
        GeminiResponseError: 構造が欠けている場合
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise GeminiResponseError(
            "Invalid response format from Gemini API",
            details={"error": repr(e)},
        ) from e

    if not isinstance(text, str):
        raise GeminiResponseError(
            "Invalid response format from Gemini API",
            details={"error": f"text is {type(text).__name__}"},
        )

    return text


class GeminiClient:
    """Gemini API とのやり取りを行うクライアント"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            api_url: Gemini APIのベースURL（Noneの場合は設定から取得）
            model: 使用するモデル名（Noneの場合は設定から取得）
            transport: httpxのトランスポート（主にテスト用）
        """
        settings = get_settings()
        self.api_url = (api_url or settings.gemini_api_url).rstrip("/")
        self.model = model or settings.gemini_model
        self._transport = transport

    @property
    def endpoint(self) -> str:
        """generateContent のURL"""
        return f"{self.api_url}/models/{self.model}:generateContent"

    def _build_headers(self, api_key: str) -> Dict[str, str]:
        """APIリクエスト用のヘッダーを構築"""
        return {
            "Content-Type": "application/json",
            "X-goog-api-key": api_key,
        }

    async def generate_content(
        self,
        prompt: str,
        api_key: str,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        """
        generateContent APIを呼び出す

        タイムアウトはhttpxのデフォルトに任せ、リトライは行わない。

        Args:
            prompt: ユーザーのテキスト（そのまま送信）
            api_key: Gemini APIキー
            config: 生成パラメータ（省略時はデフォルト値）

        Returns:
            最初の候補のテキスト

        Raises:
            GeminiHTTPError: 2xx以外のステータス
            GeminiResponseError: レスポンス構造が不正
            GeminiConnectionError: 接続失敗（タイムアウトは GeminiTimeoutError）
        """
        config = config or GenerationConfig()

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config.to_payload(),
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    headers=self._build_headers(api_key),
                    json=payload,
                )
                response.raise_for_status()

                data: Dict[str, Any] = response.json()
                return extract_candidate_text(data)

            except httpx.HTTPStatusError as e:
                # レスポンス本文にはAPIキー関連の情報が含まれうるため、ステータスのみ保持
                status_code = e.response.status_code
                logger.warning(
                    "Gemini API returned error status",
                    extra={"status_code": status_code, "model": self.model},
                )
                raise GeminiHTTPError(
                    f"Gemini API request failed: {status_code}",
                    status_code=status_code,
                ) from e

            except ValueError as e:
                # JSONデコード失敗
                raise GeminiResponseError(
                    "Invalid JSON from Gemini API",
                    details={"error": str(e)},
                ) from e

            except httpx.TimeoutException as e:
                raise GeminiTimeoutError(
                    "Gemini API request timed out",
                    details={"error": type(e).__name__},
                ) from e

            except httpx.RequestError as e:
                raise GeminiConnectionError(
                    "Failed to connect to Gemini API",
                    details={"error": str(e)},
                ) from e


# グローバルなGeminiクライアントインスタンス
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """
    グローバルなGeminiクライアントインスタンスを取得
    （シングルトンパターン）
    """
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
