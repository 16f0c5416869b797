"""
Adapters
ポートの具体的な実装
"""

from .clock import ManualClock, SystemClock
from .storage import FileShareStorageAdapter, InMemoryShareStorage

__all__ = [
    "ManualClock",
    "SystemClock",
    "FileShareStorageAdapter",
    "InMemoryShareStorage",
]
