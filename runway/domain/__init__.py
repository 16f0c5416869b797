"""
Domain Layer
共有パイプラインのモデル・ポート・サービス
"""

from .models import (
    Airfield,
    Coordinates,
    FlightPath,
    ShareableData,
    ShareLink,
    ShareMetadata,
    ShareRecord,
)
from .ports import IClock, IShareStorage
from .services import ShareService, ShareSweeper

__all__ = [
    # Models
    "Airfield",
    "Coordinates",
    "FlightPath",
    "ShareableData",
    "ShareLink",
    "ShareMetadata",
    "ShareRecord",
    # Ports
    "IClock",
    "IShareStorage",
    # Services
    "ShareService",
    "ShareSweeper",
]
