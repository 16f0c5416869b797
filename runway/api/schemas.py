"""
API Schemas
Pydanticモデル定義

ワイヤ形式はブラウザ側クライアントに合わせて camelCase。
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictInt


def to_iso8601(value: datetime) -> str:
    """UTC の ISO-8601 文字列（ミリ秒、末尾 Z）に変換"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# === 共有 ===


class CreateShareRequest(BaseModel):
    """共有作成リクエスト"""

    model_config = ConfigDict(populate_by_name=True)

    # 空文字・サイズ上限はサービス層で検証
    encrypted_data: str = Field(..., alias="encryptedData", description="Base64エンコードされた暗号文")
    expires_in: StrictInt | None = Field(None, alias="expiresIn", description="有効期限(秒)")


class CreateShareResponse(BaseModel):
    """共有作成レスポンス"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    expires_at: str = Field(..., alias="expiresAt")


class GetShareResponse(BaseModel):
    """共有取得レスポンス"""

    model_config = ConfigDict(populate_by_name=True)

    encrypted_data: str = Field(..., alias="encryptedData")


class ErrorDetail(BaseModel):
    """エラー詳細"""

    error: str
    message: str


class ErrorResponse(BaseModel):
    """エラーレスポンス"""

    detail: ErrorDetail


# === システム ===


class HealthResponse(BaseModel):
    """ヘルスチェックレスポンス"""

    status: str
    shares: int
    timestamp: str
    version: str


class APIInfoResponse(BaseModel):
    """API情報レスポンス"""

    service: str
    version: str
    description: str
    features: list[str]
