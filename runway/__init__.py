"""
Runway - フライトログのゼロナレッジ共有

プライバシーファーストの共有パイプライン:
- クライアント側暗号化: 飛行場・フライトはブラウザ/CLI側で AES-GCM 暗号化
- Zero-Knowledge: サーバーは暗号文のみを期限付きで保持し、鍵を受け取らない
- 鍵は共有URLのフラグメントでのみ受け渡す
"""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import tomllib

_pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
if _pyproject.exists():
    with _pyproject.open("rb") as _f:
        __version__: str = tomllib.load(_f)["project"]["version"]
else:
    try:
        __version__ = version("runway-share")
    except PackageNotFoundError:
        __version__ = "0.0.0"

# ===== Encryption =====
from .core.encryption import decrypt, encrypt, generate_key, is_valid_key_format

# ===== Domain Models =====
from .domain.models import (
    Airfield,
    Coordinates,
    FlightPath,
    ShareableData,
    ShareLink,
    ShareRecord,
)

# ===== Ports (Interfaces) =====
from .domain.ports import IClock, IShareStorage

# ===== Domain Services =====
from .domain.services import ShareService, ShareSweeper


# ===== Client (lazy import) =====
# クライアントは httpx に依存するため遅延インポート
def get_share_client():
    from .client.share_client import ShareClient

    return ShareClient


# ===== API (lazy import) =====
def get_app():
    from .api.main import app

    return app


def create_app():
    from .api.main import create_app as _create_app

    return _create_app()


__all__ = [
    # Version
    "__version__",
    # Encryption
    "generate_key",
    "encrypt",
    "decrypt",
    "is_valid_key_format",
    # Domain Models
    "Airfield",
    "Coordinates",
    "FlightPath",
    "ShareableData",
    "ShareLink",
    "ShareRecord",
    # Domain Services
    "ShareService",
    "ShareSweeper",
    # Ports
    "IClock",
    "IShareStorage",
    # Client (lazy)
    "get_share_client",
    # API (lazy)
    "get_app",
    "create_app",
]
