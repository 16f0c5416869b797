"""
Runway Share API Client
共有の作成（暗号化 → アップロード）と閲覧（取得 → 復号）

鍵はクライアント内で生成・使用し、APIには送らない。
通信失敗時の自動リトライは行わない（呼び出し側で再試行する）。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from ..core.config import DEFAULT_TTL_SECONDS, get_settings
from ..core.encryption import decrypt, encrypt, generate_key
from ..core.exceptions import ShareNotFoundError, ShareServiceError, ValidationError
from ..core.logging import get_logger
from ..domain.models.airfield import Airfield, FlightPath
from ..domain.models.share import ShareableData, ShareLink
from .urls import build_share_url, parse_share_url

logger = get_logger(__name__)


class ShareClient:
    """共有APIクライアント"""

    def __init__(
        self,
        api_url: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.api_url = (api_url or settings.share_api_url).rstrip("/")
        self.base_url = (base_url or settings.public_base_url).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ShareClient":
        """非同期コンテキストマネージャー開始"""
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """非同期コンテキストマネージャー終了"""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ShareClient must be used as an async context manager")
        return self._client

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http().request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Share API request failed: {method} {url}: {e}")
            raise ShareServiceError(f"Share API request failed: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        detail = body.get("detail") if isinstance(body, dict) else body
        if isinstance(detail, dict):
            return detail.get("message", str(detail))
        return str(detail)

    async def create_share(
        self,
        airfields: list[Airfield],
        flight_paths: list[FlightPath],
        title: str | None = None,
        expires_in: int | None = DEFAULT_TTL_SECONDS,
    ) -> ShareLink:
        """
        飛行場・フライトを暗号化して共有リンクを作成

        Returns:
            ShareLink: 鍵をフラグメントに含む共有URL
        """
        key = generate_key()
        payload = ShareableData.build(airfields, flight_paths, title=title)
        encrypted_data = encrypt(payload.to_dict(), key)

        body: dict[str, Any] = {"encryptedData": encrypted_data}
        if expires_in is not None:
            body["expiresIn"] = expires_in

        logger.info(
            f"Creating share: {len(airfields)} airfield(s), {len(flight_paths)} flight(s)"
        )
        response = await self._request("POST", self.api_url, json=body)

        if response.status_code != 201:
            raise ShareServiceError(
                f"Failed to create share: {self._error_message(response)}",
                status_code=response.status_code,
            )

        data = response.json()
        expires_at = data.get("expiresAt")

        return ShareLink(
            id=data["id"],
            key=key,
            url=build_share_url(self.base_url, data["id"], key),
            expires_at=datetime.fromisoformat(expires_at.replace("Z", "+00:00")) if expires_at else None,
        )

    async def fetch_share(self, identifier: str) -> str:
        """
        暗号化Blobを取得

        Raises:
            ShareNotFoundError: 存在しない、または期限切れ
            ShareServiceError: その他のAPIエラー・通信エラー
        """
        response = await self._request("GET", f"{self.api_url}/{identifier}")

        if response.status_code == 404:
            raise ShareNotFoundError(identifier)

        if response.status_code != 200:
            raise ShareServiceError(
                f"Failed to retrieve share: {self._error_message(response)}",
                status_code=response.status_code,
            )

        return response.json()["encryptedData"]

    async def open_share(self, url: str) -> ShareableData:
        """
        共有URLを開いて復号

        鍵の形式は通信前に検証する。
        鍵違い・改ざんは DecryptionError（ShareNotFoundError とは区別）。
        """
        identifier, key = parse_share_url(url)
        encrypted_data = await self.fetch_share(identifier)
        payload = decrypt(encrypted_data, key)

        if not isinstance(payload, dict):
            raise ValidationError("Shared payload has an unexpected format")

        try:
            return ShareableData.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValidationError("Shared payload has an unexpected format") from e

    async def health(self) -> dict[str, Any]:
        """共有APIのヘルスチェック"""
        # api_url は .../api/shares
        root = httpx.URL(self.api_url).copy_with(path="/health")
        response = await self._request("GET", str(root))

        if response.status_code != 200:
            raise ShareServiceError("Health check failed", status_code=response.status_code)

        return response.json()
