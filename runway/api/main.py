"""
Runway Share API - メインアプリケーション
暗号化Blobを期限付きで預かる最小限のキーバリューサービス
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .. import __version__
from ..core.config import RunwaySettings, get_settings
from ..core.logging import RunwayLogger, get_logger
from ..domain.services.share import ShareService
from ..domain.services.sweeper import ShareSweeper
from .dependencies import build_share_service, get_share_service
from .middleware import (
    RateLimiter,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from .routes import shares_router
from .schemas import APIInfoResponse, HealthResponse, to_iso8601

logger = get_logger("api.main")

API_VERSION = __version__


class APIVersionMiddleware(BaseHTTPMiddleware):
    """APIバージョンをレスポンスヘッダーに追加"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-API-Version"] = API_VERSION
        return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """リクエスト検証エラーは 422 ではなく 400 で返す"""
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.info(f"Rejected invalid request: {request.method} {request.url.path} {fields}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": "invalid_request",
                "message": "Invalid request: " + ", ".join(fields) if fields else "Invalid request",
            },
        },
    )


def create_app(
    settings: Optional[RunwaySettings] = None,
    share_service: Optional[ShareService] = None,
) -> FastAPI:
    """
    FastAPIアプリケーションを作成

    Args:
        settings: 省略時はグローバル設定
        share_service: 省略時は settings.share から作成
    """
    if share_service is None:
        share_service = get_share_service() if settings is None else build_share_service(settings.share)
    settings = settings or get_settings()
    RunwayLogger.configure(log_level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """アプリケーションライフサイクル"""
        sweeper = ShareSweeper(share_service, interval_seconds=settings.share.sweep_interval_seconds)

        logger.info(f"Runway Share API v{API_VERSION} starting...")
        logger.info(f"Storage backend: {settings.share.storage_backend}")
        logger.info(f"Default TTL: {settings.share.default_ttl_seconds}s")
        logger.info(f"Rate limiting: {settings.security.rate_limit_enabled}")

        sweeper.start()
        app.state.sweeper = sweeper

        yield

        await sweeper.stop()
        logger.info("Runway Share API shutting down...")

    application = FastAPI(
        title="Runway Share API",
        description=(
            "フライトログ共有用のゼロナレッジ・ストア\n\n"
            "**特徴:**\n"
            "- クライアント側で AES-GCM 暗号化、サーバーは暗号文のみ保持\n"
            "- 鍵は共有URLのフラグメントでのみ受け渡し\n"
            "- 期限付き保存と定期掃除\n"
        ),
        version=API_VERSION,
        lifespan=lifespan,
    )

    application.state.share_service = share_service

    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    # ミドルウェア（実行順序: 下から上）
    # 1. CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    # 2. セキュリティヘッダー
    application.add_middleware(SecurityHeadersMiddleware)
    # 3. レート制限
    if settings.security.rate_limit_enabled:
        application.add_middleware(
            RateLimitMiddleware,
            limiter=RateLimiter(
                max_requests=settings.security.rate_limit_requests,
                window_seconds=settings.security.rate_limit_window,
                trust_forwarded_for=settings.security.trust_forwarded_for,
            ),
        )
    # 4. リクエストログ
    application.add_middleware(RequestLoggingMiddleware)
    # 5. API バージョン
    application.add_middleware(APIVersionMiddleware)

    # ルーター登録
    application.include_router(shares_router)

    @application.get("/", response_model=APIInfoResponse)
    async def root() -> APIInfoResponse:
        """API情報を取得"""
        return APIInfoResponse(
            service="Runway Share API",
            version=API_VERSION,
            description="暗号化されたフライトログ共有データを期限付きで保存",
            features=[
                "ゼロナレッジ共有",
                "期限付き保存",
                "期限切れの自動掃除",
            ],
        )

    @application.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """ヘルスチェック"""
        count = await application.state.share_service.count()
        return HealthResponse(
            status="ok",
            shares=count,
            timestamp=to_iso8601(datetime.now(timezone.utc)),
            version=API_VERSION,
        )

    return application


# デフォルトアプリケーションインスタンス
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.api_host, port=_settings.api_port)
