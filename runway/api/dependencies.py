"""
API Dependencies
依存性注入の設定
"""

from typing import Optional

from fastapi import Request

from ..adapters.clock import SystemClock
from ..adapters.storage.file import FileShareStorageAdapter
from ..adapters.storage.memory import InMemoryShareStorage
from ..core.config import ShareSettings, get_settings
from ..domain.ports.clock_port import IClock
from ..domain.ports.share_storage_port import IShareStorage
from ..domain.services.share import ShareService

# === シングルトンインスタンス ===

_storage: Optional[IShareStorage] = None
_share_service: Optional[ShareService] = None


# === 組み立て ===


def build_storage(share_settings: ShareSettings) -> IShareStorage:
    """設定からストレージを作成

    storage_backend=file でファイルストレージを使用
    """
    if share_settings.storage_backend == "file":
        return FileShareStorageAdapter(data_dir=share_settings.data_dir)
    return InMemoryShareStorage()


def build_share_service(
    share_settings: ShareSettings,
    storage: Optional[IShareStorage] = None,
    clock: Optional[IClock] = None,
) -> ShareService:
    """設定から共有サービスを作成"""
    return ShareService(
        storage=storage or build_storage(share_settings),
        clock=clock or SystemClock(),
        default_ttl_seconds=share_settings.default_ttl_seconds,
        max_ttl_seconds=share_settings.max_ttl_seconds,
        max_blob_bytes=share_settings.max_blob_bytes,
    )


# === 依存性取得関数 ===


def get_storage() -> IShareStorage:
    """グローバル設定のストレージを取得"""
    global _storage
    if _storage is None:
        _storage = build_storage(get_settings().share)
    return _storage


def get_share_service() -> ShareService:
    """グローバル設定の共有サービスを取得"""
    global _share_service
    if _share_service is None:
        _share_service = build_share_service(get_settings().share, storage=get_storage())
    return _share_service


def get_app_share_service(request: Request) -> ShareService:
    """アプリケーションに紐づいた共有サービスを取得（ルート用）"""
    return request.app.state.share_service


# === テスト用リセット関数 ===


def reset_dependencies() -> None:
    """依存性をリセット（テスト用）"""
    global _storage, _share_service
    _storage = None
    _share_service = None
