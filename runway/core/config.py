"""
統合設定管理

pydantic-settings を使用した型安全な設定管理
- 環境変数から自動読み込み
- バリデーション付き
- デフォルト値対応
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 30日
DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60
# 365日
MAX_TTL_SECONDS = 365 * 24 * 60 * 60
# 5 MiB
MAX_BLOB_BYTES = 5 * 1024 * 1024


class ShareSettings(BaseSettings):
    """共有ストア設定"""

    model_config = SettingsConfigDict(env_prefix="RUNWAY_SHARE_")

    default_ttl_seconds: int = Field(default=DEFAULT_TTL_SECONDS, gt=0, description="既定の有効期限(秒)")
    max_ttl_seconds: int = Field(default=MAX_TTL_SECONDS, gt=0, description="有効期限の上限(秒)")
    max_blob_bytes: int = Field(default=MAX_BLOB_BYTES, gt=0, description="暗号化Blobの最大サイズ(バイト)")
    sweep_interval_seconds: float = Field(default=3600, gt=0, description="期限切れ掃除の間隔(秒)")

    # ストレージ
    storage_backend: Literal["memory", "file"] = Field(default="memory", description="ストレージ種別")
    data_dir: str = Field(default="data/shares", description="file バックエンドの保存先")


class SecuritySettings(BaseSettings):
    """セキュリティ設定"""

    model_config = SettingsConfigDict(env_prefix="RUNWAY_")

    # CORS（カンマ区切り文字列で指定）
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:4173,http://localhost:3000",
        alias="RUNWAY_CORS_ORIGINS",
        description="許可するオリジン（カンマ区切り）",
    )

    # レート制限
    rate_limit_enabled: bool = Field(default=True, description="レート制限を有効化")
    rate_limit_requests: int = Field(default=60, description="レート制限: リクエスト数")
    rate_limit_window: int = Field(default=60, description="レート制限: ウィンドウ(秒)")
    trust_forwarded_for: bool = Field(
        default=False,
        description="X-Forwarded-For をクライアントIPとして信頼（リバースプロキシ配下でのみ有効化）",
    )

    @property
    def cors_origins(self) -> List[str]:
        """許可オリジンのリストを取得"""
        if not self.cors_origins_str:
            return []
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]


class RunwaySettings(BaseSettings):
    """Runway 全体設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 基本設定
    debug: bool = Field(default=False, alias="RUNWAY_DEBUG", description="デバッグモード")
    log_level: str = Field(default="INFO", alias="RUNWAY_LOG_LEVEL", description="ログレベル")

    # サブ設定
    share: ShareSettings = Field(default_factory=ShareSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    # API サーバー設定
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API サーバーホスト")
    api_port: int = Field(default=3008, alias="API_PORT", description="API サーバーポート")

    # クライアント設定
    share_api_url: str = Field(
        default="http://localhost:3008/api/shares",
        alias="RUNWAY_SHARE_API_URL",
        description="共有APIのエンドポイント",
    )
    public_base_url: str = Field(
        default="http://localhost:5173",
        alias="RUNWAY_PUBLIC_BASE_URL",
        description="共有リンクのベースURL",
    )

    @field_validator("share_api_url", "public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """末尾スラッシュを除去"""
        return v.rstrip("/")

    @classmethod
    def load(cls) -> "RunwaySettings":
        """設定をロード（サブ設定も含む）"""
        return cls(
            share=ShareSettings(),
            security=SecuritySettings(),
        )


@lru_cache()
def get_settings() -> RunwaySettings:
    """
    設定を取得（キャッシュ付き）

    使用例:
        settings = get_settings()
        print(settings.share.default_ttl_seconds)
    """
    return RunwaySettings.load()


def reload_settings() -> RunwaySettings:
    """設定を再読み込み"""
    get_settings.cache_clear()
    return get_settings()
