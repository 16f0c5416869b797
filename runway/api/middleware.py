"""
API ミドルウェア

- レート制限
- セキュリティヘッダー
- 共有APIアクセスログ
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from ..core.logging import get_logger
from ..domain.services.share import is_valid_identifier

SHARES_PREFIX = "/api/shares"

# レート制限の対象外パス
EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/openapi.json", "/redoc"})


# === レート制限 ===


class RateLimiter:
    """
    インメモリレート制限

    スライディングウィンドウ方式でリクエスト数を制限。
    複数プロセス構成では Redis ベースの実装に置き換えること。
    """

    # 追跡するクライアント数の上限（超えたら古い記録をパージ）
    MAX_TRACKED_CLIENTS = 10000

    def __init__(self, max_requests: int = 60, window_seconds: int = 60,
                 trust_forwarded_for: bool = False):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.trust_forwarded_for = trust_forwarded_for
        self._requests: dict[str, list[float]] = defaultdict(list)

    def _get_client_id(self, request: Request) -> str:
        """クライアント識別子を取得"""
        # X-Forwarded-For はクライアントが自由に付けられるため、信頼するプロキシ配下でのみ使う
        if self.trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                return f"ip:{forwarded.split(',')[0].strip()}"

        client = request.client
        if client:
            return f"ip:{client.host}"

        return "unknown"

    def _purge(self, current_time: float) -> None:
        cutoff = current_time - self.window_seconds
        self._requests = defaultdict(list, {
            k: [t for t in v if t > cutoff]
            for k, v in self._requests.items()
            if any(t > cutoff for t in v)
        })

    def is_allowed(self, request: Request) -> tuple[bool, dict]:
        """
        リクエストが許可されるか確認

        Returns:
            (allowed, info) - 許可されるかと、レート制限情報
        """
        current_time = time.time()
        client_id = self._get_client_id(request)

        # メモリ保護
        if len(self._requests) > self.MAX_TRACKED_CLIENTS:
            self._purge(current_time)

        cutoff = current_time - self.window_seconds
        self._requests[client_id] = [t for t in self._requests[client_id] if t > cutoff]

        request_count = len(self._requests[client_id])
        remaining = max(0, self.max_requests - request_count)

        info = {
            "limit": self.max_requests,
            "remaining": remaining,
            "reset": int(current_time + self.window_seconds),
            "window": self.window_seconds,
        }

        if request_count >= self.max_requests:
            return False, info

        self._requests[client_id].append(current_time)
        info["remaining"] = remaining - 1

        return True, info


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    レート制限ミドルウェア

    制限を超えた場合は 429 Too Many Requests を返す。
    """

    def __init__(self, app: ASGIApp, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        allowed, info = self.limiter.is_allowed(request)

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={
                    "detail": {
                        "error": "too_many_requests",
                        "message": "Too many requests, please retry later",
                    },
                },
                headers={
                    "X-RateLimit-Limit": str(info["limit"]),
                    "X-RateLimit-Remaining": str(info["remaining"]),
                    "X-RateLimit-Reset": str(info["reset"]),
                    "Retry-After": str(info["window"]),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(info["limit"])
        response.headers["X-RateLimit-Remaining"] = str(info["remaining"])
        response.headers["X-RateLimit-Reset"] = str(info["reset"])

        return response


# === セキュリティヘッダーミドルウェア ===


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    セキュリティヘッダーを追加

    共有Blobをキャッシュさせない（期限切れ後も残らないように）。
    """

    DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"

        if request.url.path.startswith(SHARES_PREFIX):
            response.headers["Cache-Control"] = "no-store"

        # CSP: ドキュメントページは CDN を許可、それ以外は厳格に
        if request.url.path in self.DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "font-src 'self' https://cdn.jsdelivr.net;"
            )
        else:
            response.headers["Content-Security-Policy"] = "default-src 'none'"

        return response


# === 共有APIアクセスログ ===

# ステータスコード → 結果ラベル
_OUTCOMES = {
    200: "found",
    201: "created",
    400: "rejected",
    404: "not_found",
    429: "rate_limited",
}


def _share_id_from_path(path: str) -> str | None:
    """/api/shares/{id} の共有ID（形式が正しい場合のみ）"""
    identifier = path[len(SHARES_PREFIX):].strip("/")
    return identifier if is_valid_identifier(identifier) else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    共有APIのアクセスログ

    1リクエスト1行で、操作・結果・共有IDを記録する。
    IPアドレス・User-Agent・リクエストボディ（暗号文）は記録しない。
    """

    async def dispatch(self, request: Request, call_next: Callable):
        path = request.url.path
        if not path.startswith(SHARES_PREFIX) or request.method == "OPTIONS":
            return await call_next(request)

        logger = get_logger("api.shares.access")
        extra = {
            "event_type": "share_request",
            "operation": "create" if request.method == "POST" else "get",
            "share_id": _share_id_from_path(path),
        }
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            extra["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(f"Share {extra['operation']} failed", extra=extra, exc_info=True)
            raise

        status_code = response.status_code
        extra.update(
            outcome=_OUTCOMES.get(status_code, "error" if status_code >= 500 else str(status_code)),
            status_code=status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        logger.log(
            logging.ERROR if status_code >= 500 else logging.INFO,
            f"Share {extra['operation']}: {extra['outcome']}",
            extra=extra,
        )

        return response
