"""
API Routes
エンドポイント定義
"""

from .shares import router as shares_router

__all__ = [
    "shares_router",
]
