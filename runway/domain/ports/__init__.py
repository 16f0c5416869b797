"""
Domain Ports
依存性逆転のためのインターフェース定義
"""

from .clock_port import IClock
from .share_storage_port import IShareStorage

__all__ = [
    "IClock",
    "IShareStorage",
]
